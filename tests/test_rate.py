"""
Tests for the Newton-Raphson periodic rate solver.
"""

import pytest

from tvmcalc.calculations.rate import (
    DEFAULT_GUESS,
    MAX_ITERATIONS,
    TOLERANCE,
    SolverConfig,
    solve_rate,
)
from tvmcalc.calculations.result import ErrorKind, Ok
from tvmcalc.calculations.tvm import future_value


class TestSolveRate:
    """Test rate calculation on well-posed scenarios."""

    def test_savings_rate(self):
        """$1K deposit plus $100/month growing to $19,318.14 over 10 years is 7%."""
        result = solve_rate(120, -100, -1000, 19318.14)
        assert isinstance(result, Ok)
        assert result.value * 12 == pytest.approx(0.07, abs=1e-6)

    def test_mortgage_rate(self):
        """$200K loan repaid at $1,073.64/month for 30 years is 5% annual."""
        result = solve_rate(360, -1073.64, 200000, 0)
        assert result.value * 12 == pytest.approx(0.05, abs=1e-5)

    def test_negative_rate(self):
        """Ending below total contributions implies a negative rate."""
        result = solve_rate(12, -100, -1000, 2000)
        assert result.value < 0

    def test_zero_rate(self):
        """Ending at exactly the contributed total implies a zero rate."""
        result = solve_rate(120, -100, -1000, 13000)
        assert result.value == pytest.approx(0.0, abs=1e-7)

    def test_idempotent(self):
        assert solve_rate(120, -100, -1000, 19318.14) == solve_rate(120, -100, -1000, 19318.14)


class TestRoundTrip:
    """Recovering the rate from a computed future value returns the original rate."""

    @pytest.mark.parametrize("rate", [-0.05, -0.01, 0.0, 0.0025, 0.07 / 12, 0.01, 0.02])
    @pytest.mark.parametrize("nper", [1, 12, 60, 120])
    def test_savings_round_trip(self, rate, nper):
        fv = future_value(rate, nper, -100, -1000).value
        result = solve_rate(nper, -100, -1000, fv)
        assert result.value == pytest.approx(rate, abs=1e-6)

    @pytest.mark.parametrize("rate", [0.05, 0.25, 0.5, 1.0])
    @pytest.mark.parametrize("nper", [60, 120])
    def test_high_rates(self, rate, nper):
        """Default guess is far below the root; iterates must not overshoot."""
        fv = future_value(rate, nper, -100, -1000).value
        result = solve_rate(nper, -100, -1000, fv)
        assert isinstance(result, Ok)
        assert result.value == pytest.approx(rate, abs=1e-6)

    @pytest.mark.parametrize("rate", [-0.5, -0.25, -0.05, 0.0, 0.05, 0.25, 0.5, 1.0])
    @pytest.mark.parametrize("nper", [12, 60, 120])
    @pytest.mark.parametrize(
        "pmt,pv",
        [(-100, -1000), (0, -1000), (-100, 0), (100, 1000)],
        ids=["deposits", "lump-sum", "annuity", "receipts"],
    )
    def test_full_rate_range(self, rate, nper, pmt, pv):
        """Same-sign pv and payment have exactly one rate for any opposite fv."""
        fv = future_value(rate, nper, pmt, pv).value
        result = solve_rate(nper, pmt, pv, fv)
        assert isinstance(result, Ok)
        assert result.value == pytest.approx(rate, abs=1e-6)

    @pytest.mark.parametrize(
        "rate,nper,pmt,pv",
        [
            (0.05, 120, 0, -1000),
            (0.25, 60, -100, -1000),
            (0.5, 120, -100, -1000),
            (1.0, 60, -100, 0),
        ],
    )
    def test_single_root_at_high_rates(self, rate, nper, pmt, pv):
        fv = future_value(rate, nper, pmt, pv).value
        result = solve_rate(nper, pmt, pv, fv)
        assert isinstance(result, Ok)
        assert result.value == pytest.approx(rate, abs=1e-6)

    def test_far_guess_converges(self):
        fv = future_value(0.01, 360, -100, -1000).value
        result = solve_rate(360, -100, -1000, fv, SolverConfig(initial_guess=0.9))
        assert result.value == pytest.approx(0.01, abs=1e-6)

    def test_lump_sum_only(self):
        """No payments: pv grows to fv."""
        fv = future_value(0.004, 48, 0, -2000).value
        result = solve_rate(48, 0, -2000, fv)
        assert result.value == pytest.approx(0.004, abs=1e-6)


class TestDegenerateInputs:
    """Test inputs with no unique rate."""

    def test_all_zero_any_rate(self):
        """Zero pv, payment and fv are satisfied by every rate."""
        result = solve_rate(120, 0, 0, 0)
        assert result.kind == ErrorKind.UNDEFINED_RESULT
        assert "Every rate" in result.message

    def test_zero_flows_nonzero_target(self):
        result = solve_rate(120, 0, 0, 5000)
        assert result.kind == ErrorKind.UNDEFINED_RESULT

    def test_no_sign_change(self):
        """Paying in and also paying out at the end cannot balance at any rate."""
        result = solve_rate(12, -100, -1000, -500)
        assert result.kind == ErrorKind.UNDEFINED_RESULT

    def test_single_payment_without_present_value(self):
        result = solve_rate(1, -100, 0, 100)
        assert result.kind == ErrorKind.UNDEFINED_RESULT


class TestFailures:
    """Test non-convergence, overflow and bad configuration."""

    @pytest.mark.parametrize("fv", [2400, 2500, 3000])
    @pytest.mark.parametrize("max_iterations", [10, 100])
    def test_near_cancellation_does_not_converge(self, fv, max_iterations):
        """
        A $100 payment nearly cancels the interest on $1,000, so the
        derivative vanishes near 4% where FV peaks around $2,365. Targets
        above the peak have no rate; the solver must stop at the cap.
        """
        config = SolverConfig(max_iterations=max_iterations)
        result = solve_rate(30, -100, 1000, fv, config)
        assert result.kind == ErrorKind.NON_CONVERGENCE

    def test_iteration_cap_respected(self):
        fv = future_value(0.01, 360, -100, -1000).value
        config = SolverConfig(initial_guess=0.9, max_iterations=2)
        result = solve_rate(360, -100, -1000, fv, config)
        assert result.kind == ErrorKind.NON_CONVERGENCE
        assert "2 iterations" in result.message

    def test_overflow(self):
        """A huge guess over many periods overflows (1 + r)^n."""
        config = SolverConfig(initial_guess=50.0)
        result = solve_rate(1000, -100, -1000, 1e6, config)
        assert result.kind == ErrorKind.NUMERIC_OVERFLOW

    @pytest.mark.parametrize(
        "config",
        [
            SolverConfig(initial_guess=-1.0),
            SolverConfig(initial_guess=float("nan")),
            SolverConfig(max_iterations=0),
            SolverConfig(max_iterations=True),
            SolverConfig(tolerance=0.0),
            SolverConfig(tolerance=-1e-7),
        ],
    )
    def test_invalid_config(self, config):
        result = solve_rate(120, -100, -1000, 19318.14, config)
        assert result.kind == ErrorKind.INVALID_INPUT

    def test_invalid_periods(self):
        result = solve_rate(0, -100, -1000, 19318.14)
        assert result.kind == ErrorKind.INVALID_INPUT


class TestSolverConfig:
    """Test solver defaults."""

    def test_defaults(self):
        config = SolverConfig()
        assert config.initial_guess == DEFAULT_GUESS == 0.005
        assert config.max_iterations == MAX_ITERATIONS == 100
        assert config.tolerance == TOLERANCE == 1e-7
        assert config.validate() is None
