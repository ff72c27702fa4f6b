"""
Periodic Rate Solver

Solves the TVM identity for the periodic rate using the Newton-Raphson
method, matching Excel's RATE() function for payments at period end.

Iteration runs on x = log(1 + rate), which keeps every iterate above -100%.
When present value and payment share a sign, the residual is log(FV / fv):
a log of a positive sum of exponentials in x, convex and increasing, so
Newton converges from any starting guess. Otherwise the residual is
discounted back to period 0 and steps are clamped to MAX_LOG_STEP.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from tvmcalc.calculations.result import Err, ErrorKind, Ok, Result, first_error
from tvmcalc.calculations.tvm import (
    CashFlowModel,
    SolveFor,
    future_value,
    number_of_periods,
    payment,
    present_value,
    residual,
    residual_derivative,
    validate_amount,
    validate_periods,
)

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
TOLERANCE = 1e-7
DEFAULT_GUESS = 0.005

# Largest Newton step in log(1 + rate) units (a factor of e in 1 + rate).
MAX_LOG_STEP = 1.0


@dataclass(frozen=True)
class SolverConfig:
    """
    Iteration parameters for solve_rate.

    Attributes:
        initial_guess: Starting periodic rate (default 0.005 = 0.5% per period)
        max_iterations: Newton steps allowed before giving up
        tolerance: Absolute change in rate between steps that counts as converged
    """

    initial_guess: float = DEFAULT_GUESS
    max_iterations: int = MAX_ITERATIONS
    tolerance: float = TOLERANCE

    def validate(self) -> Optional[Err]:
        error = validate_amount("initial_guess", self.initial_guess)
        if error is not None:
            return error
        if self.initial_guess <= -1:
            return Err(ErrorKind.INVALID_INPUT, "initial_guess must be greater than -1")
        if (
            isinstance(self.max_iterations, bool)
            or not isinstance(self.max_iterations, int)
            or self.max_iterations < 1
        ):
            return Err(ErrorKind.INVALID_INPUT, "max_iterations must be a positive integer")
        error = validate_amount("tolerance", self.tolerance)
        if error is not None:
            return error
        if self.tolerance <= 0:
            return Err(ErrorKind.INVALID_INPUT, "tolerance must be positive")
        return None


def _degenerate(nper: int, pmt: float, pv: float, fv: float) -> Optional[Err]:
    """Detect inputs where the rate is indeterminate or cannot exist."""
    if pv == 0 and pmt == 0 and fv == 0:
        return Err(
            ErrorKind.UNDEFINED_RESULT,
            "Every rate satisfies zero present value, payment and future value",
        )
    if pv == 0 and nper == 1:
        # A single end-of-period payment never earns interest.
        return Err(
            ErrorKind.UNDEFINED_RESULT,
            "Rate has no effect on a single payment with zero present value",
        )

    flows = (pv, pmt, fv)
    if all(cf >= 0 for cf in flows) or all(cf <= 0 for cf in flows):
        return Err(
            ErrorKind.UNDEFINED_RESULT,
            "Cash flows must contain both positive and negative values",
        )
    return None


def _log_growth_objective(
    rate: float, nper: int, pmt: float, pv: float, fv: float
) -> Tuple[float, float]:
    """log(FV(rate) / fv) and its slope with respect to log(1 + rate)."""
    projected = residual(rate, nper, pmt, pv, 0.0)
    slope = residual_derivative(rate, nper, pmt, pv) * (1.0 + rate) / projected
    return math.log(projected / fv), slope


def _discounted_objective(
    rate: float, nper: int, pmt: float, pv: float, fv: float
) -> Tuple[float, float]:
    """Residual discounted to period 0 and its slope with respect to log(1 + rate)."""
    growth = (1.0 + rate) ** nper
    value = residual(rate, nper, pmt, pv, fv)
    slope = residual_derivative(rate, nper, pmt, pv) * (1.0 + rate) - nper * value
    return value / growth, slope / growth


def solve_rate(
    nper: int,
    pmt: float,
    pv: float,
    fv: float,
    config: Optional[SolverConfig] = None,
) -> Result:
    """
    Calculate the periodic rate using Newton-Raphson method.

    Args:
        nper: Number of compounding periods
        pmt: Payment made each period
        pv: Present value
        fv: Future value
        config: Iteration parameters (defaults: guess 0.005, 100 iterations,
            tolerance 1e-7)

    Returns:
        Ok(periodic rate as decimal) or Err. The rate is per period;
        annualizing it is left to the caller.
    """
    config = config or SolverConfig()

    error = first_error(
        validate_periods(nper),
        validate_amount("payment", pmt),
        validate_amount("present_value", pv),
        validate_amount("future_value", fv),
        config.validate(),
    )
    if error is not None:
        return error

    error = _degenerate(nper, pmt, pv, fv)
    if error is not None:
        return error

    if pv * pmt >= 0 and fv * (pv + pmt) < 0:
        objective = _log_growth_objective
    else:
        objective = _discounted_objective

    rate = config.initial_guess
    log_rate = math.log1p(rate)

    for iteration in range(1, config.max_iterations + 1):
        try:
            value, slope = objective(rate, nper, pmt, pv, fv)
        except (OverflowError, ZeroDivisionError, ValueError):
            value = slope = math.inf

        if not (math.isfinite(value) and math.isfinite(slope)):
            logger.debug("Rate iteration %d overflowed at rate %r", iteration, rate)
            return Err(
                ErrorKind.NUMERIC_OVERFLOW,
                f"Rate calculation overflowed at rate {rate:.6g}",
            )

        if slope == 0:
            logger.debug("Rate iteration %d hit a zero derivative at rate %r", iteration, rate)
            return Err(
                ErrorKind.NON_CONVERGENCE,
                "Rate calculation failed: derivative vanished",
            )

        step = value / slope
        if not math.isfinite(step):
            logger.debug("Rate iteration %d produced a non-finite step", iteration)
            return Err(
                ErrorKind.NUMERIC_OVERFLOW,
                f"Rate calculation overflowed at rate {rate:.6g}",
            )
        step = max(-MAX_LOG_STEP, min(MAX_LOG_STEP, step))

        new_log_rate = log_rate - step
        try:
            new_rate = math.expm1(new_log_rate)
        except OverflowError:
            return Err(
                ErrorKind.NUMERIC_OVERFLOW,
                f"Rate calculation overflowed at rate {rate:.6g}",
            )
        if new_rate <= -1:
            logger.debug("Rate iteration %d left the domain: %r", iteration, new_rate)
            return Err(
                ErrorKind.NON_CONVERGENCE,
                "Rate calculation diverged below -100%",
            )

        if abs(new_rate - rate) < config.tolerance:
            logger.debug("Rate converged to %r after %d iterations", new_rate, iteration)
            return Ok(new_rate)

        rate = new_rate
        log_rate = new_log_rate

    logger.debug("Rate did not converge in %d iterations", config.max_iterations)
    return Err(
        ErrorKind.NON_CONVERGENCE,
        f"Rate calculation did not converge within {config.max_iterations} iterations",
    )


def solve(solve_for, model: CashFlowModel, config: Optional[SolverConfig] = None) -> Result:
    """
    Solve one TVM scenario for the requested unknown.

    Args:
        solve_for: SolveFor member or its string value ("pv", "fv", ...)
        model: Scenario with the four known fields filled in
        config: Rate solver parameters, used only when solving for rate

    Returns:
        Ok(value) or Err
    """
    try:
        target = SolveFor(solve_for)
    except ValueError:
        return Err(ErrorKind.INVALID_INPUT, f"Unknown solve target: {solve_for!r}")

    if target == SolveFor.FUTURE_VALUE:
        return future_value(
            model.periodic_rate, model.number_of_periods, model.payment, model.present_value
        )
    if target == SolveFor.PRESENT_VALUE:
        return present_value(
            model.periodic_rate, model.number_of_periods, model.payment, model.future_value
        )
    if target == SolveFor.PAYMENT:
        return payment(
            model.periodic_rate, model.number_of_periods, model.present_value, model.future_value
        )
    if target == SolveFor.NUMBER_OF_PERIODS:
        return number_of_periods(
            model.periodic_rate, model.payment, model.present_value, model.future_value
        )
    return solve_rate(
        model.number_of_periods,
        model.payment,
        model.present_value,
        model.future_value,
        config=config,
    )
