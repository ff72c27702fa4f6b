"""
Time Value of Money Calculations

Closed-form solvers for future value, present value, payment and number of
periods, matching the behavior of the spreadsheet FV/PV/PMT/NPER functions
for an ordinary annuity (payments at the end of each period).

Sign convention: cash paid out is negative, cash received is positive.
Every solver satisfies the same identity:

    pv * (1 + r)^n + pmt * ((1 + r)^n - 1) / r + fv = 0     (r != 0)
    pv + pmt * n + fv = 0                                    (r == 0)
"""

import enum
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from tvmcalc.calculations.result import Err, ErrorKind, Ok, Result, first_error

logger = logging.getLogger(__name__)


class SolveFor(str, enum.Enum):
    """The unknown a caller asks the engine to solve for."""

    PRESENT_VALUE = "pv"
    FUTURE_VALUE = "fv"
    PAYMENT = "pmt"
    NUMBER_OF_PERIODS = "nper"
    RATE = "rate"


@dataclass(frozen=True)
class CashFlowModel:
    """
    One TVM scenario.

    The field being solved for is left as None; the other four are given.
    Rates are periodic fractions (0.005 = 0.5% per period).
    """

    present_value: Optional[float] = None
    future_value: Optional[float] = None
    payment: Optional[float] = None
    number_of_periods: Optional[int] = None
    periodic_rate: Optional[float] = None


def validate_amount(name: str, value) -> Optional[Err]:
    """Check that a cash-flow field is present and finite."""
    if value is None:
        return Err(ErrorKind.INVALID_INPUT, f"{name} is required")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return Err(ErrorKind.INVALID_INPUT, f"{name} must be a number")
    try:
        finite = math.isfinite(value)
    except OverflowError:
        # Integers beyond float range
        return Err(ErrorKind.INVALID_INPUT, f"{name} is too large")
    if not finite:
        return Err(ErrorKind.INVALID_INPUT, f"{name} must be finite")
    return None


def validate_periods(nper) -> Optional[Err]:
    """Check that the period count is a whole number of at least 1."""
    error = validate_amount("number_of_periods", nper)
    if error is not None:
        return error
    if nper < 1:
        return Err(ErrorKind.INVALID_INPUT, "number_of_periods must be at least 1")
    if nper != int(nper):
        return Err(ErrorKind.INVALID_INPUT, "number_of_periods must be a whole number")
    return None


def validate_rate(rate) -> Optional[Err]:
    """Check that the periodic rate is finite and not below -100%."""
    error = validate_amount("periodic_rate", rate)
    if error is not None:
        return error
    if rate < -1:
        return Err(ErrorKind.INVALID_INPUT, "periodic_rate must be at least -1")
    return None


def _growth(rate: float, nper: float) -> Tuple[float, float]:
    """
    Return (1 + r)^n and (1 + r)^n - 1.

    The second term uses expm1/log1p so it stays accurate for rates near zero.
    Raises OverflowError when the growth factor is not representable.
    """
    if rate > -1:
        growth_minus_one = math.expm1(nper * math.log1p(rate))
        return growth_minus_one + 1.0, growth_minus_one
    growth = (1.0 + rate) ** nper
    return growth, growth - 1.0


def _future_value(rate: float, nper: float, pmt: float, pv: float) -> float:
    if rate == 0:
        return -(pv + pmt * nper)
    growth, growth_minus_one = _growth(rate, nper)
    return -(pv * growth + pmt * growth_minus_one / rate)


def _overflow(label: str) -> Err:
    logger.debug("%s overflowed", label)
    return Err(ErrorKind.NUMERIC_OVERFLOW, f"{label} calculation overflowed")


def _finite_result(label: str, value: float) -> Result:
    if not math.isfinite(value):
        return _overflow(label)
    return Ok(value)


def residual(rate: float, nper: float, pmt: float, pv: float, fv: float) -> float:
    """
    Residual of the TVM identity at a trial rate: FV(rate) - fv.

    Zero at the rate that reconciles the cash flows. Raises OverflowError
    when the growth factor overflows.
    """
    return _future_value(rate, nper, pmt, pv) - fv


def residual_derivative(rate: float, nper: float, pmt: float, pv: float) -> float:
    """Analytic derivative of FV(rate) with respect to rate (for Newton-Raphson)."""
    if rate == 0:
        return -(pv * nper + pmt * nper * (nper - 1) / 2.0)

    growth, growth_minus_one = _growth(rate, nper)
    d_growth = nper * (1.0 + rate) ** (nper - 1)
    d_annuity = (d_growth * rate - growth_minus_one) / (rate * rate)
    return -(pv * d_growth + pmt * d_annuity)


def future_value(rate: float, nper: int, pmt: float, pv: float) -> Result:
    """
    Calculate future value.

    Matches Excel's FV() function with payments at period end.

    Args:
        rate: Periodic interest rate as decimal (e.g., 0.005 for 0.5%)
        nper: Number of compounding periods
        pmt: Payment made each period (negative = paid out)
        pv: Present value (negative = paid out)

    Returns:
        Ok(future value) or Err
    """
    error = first_error(
        validate_rate(rate),
        validate_periods(nper),
        validate_amount("payment", pmt),
        validate_amount("present_value", pv),
    )
    if error is not None:
        return error

    try:
        value = _future_value(rate, nper, pmt, pv)
    except OverflowError:
        return _overflow("Future value")
    return _finite_result("Future value", value)


def present_value(rate: float, nper: int, pmt: float, fv: float) -> Result:
    """
    Calculate present value.

    Matches Excel's PV() function with payments at period end.

    Args:
        rate: Periodic interest rate as decimal
        nper: Number of compounding periods
        pmt: Payment made each period
        fv: Future value

    Returns:
        Ok(present value) or Err
    """
    error = first_error(
        validate_rate(rate),
        validate_periods(nper),
        validate_amount("payment", pmt),
        validate_amount("future_value", fv),
    )
    if error is not None:
        return error

    if rate == 0:
        return _finite_result("Present value", -(fv + pmt * nper))

    try:
        growth, growth_minus_one = _growth(rate, nper)
        if growth == 0:
            return Err(
                ErrorKind.UNDEFINED_RESULT,
                "Present value is undefined at a -100% rate",
            )
        value = -(pmt * growth_minus_one / rate + fv) / growth
    except OverflowError:
        return _overflow("Present value")
    return _finite_result("Present value", value)


def payment(rate: float, nper: int, pv: float, fv: float) -> Result:
    """
    Calculate the constant periodic payment.

    Matches Excel's PMT() function with payments at period end.

    Args:
        rate: Periodic interest rate as decimal
        nper: Number of compounding periods
        pv: Present value (e.g., loan principal received = positive)
        fv: Future value (balance remaining after the last payment)

    Returns:
        Ok(payment) or Err
    """
    error = first_error(
        validate_rate(rate),
        validate_periods(nper),
        validate_amount("present_value", pv),
        validate_amount("future_value", fv),
    )
    if error is not None:
        return error

    if rate == 0:
        return _finite_result("Payment", -(pv + fv) / nper)

    try:
        growth, growth_minus_one = _growth(rate, nper)
        if growth_minus_one == 0:
            return Err(
                ErrorKind.UNDEFINED_RESULT,
                "Payment is undefined when the balance does not compound",
            )
        value = -(fv + pv * growth) * rate / growth_minus_one
    except OverflowError:
        return _overflow("Payment")
    return _finite_result("Payment", value)


def number_of_periods(rate: float, pmt: float, pv: float, fv: float) -> Result:
    """
    Calculate the number of periods needed to move from pv to fv.

    Matches Excel's NPER() function with payments at period end. The result
    is not rounded; fractional periods are returned as-is.

    Args:
        rate: Periodic interest rate as decimal
        pmt: Payment made each period
        pv: Present value
        fv: Future value

    Returns:
        Ok(number of periods) or Err(UNDEFINED_RESULT) when no positive
        period count reconciles the cash flows
    """
    error = first_error(
        validate_rate(rate),
        validate_amount("payment", pmt),
        validate_amount("present_value", pv),
        validate_amount("future_value", fv),
    )
    if error is not None:
        return error

    if rate == 0:
        if pmt == 0:
            return Err(
                ErrorKind.UNDEFINED_RESULT,
                "Number of periods is undefined with zero rate and zero payment",
            )
        value = -(pv + fv) / pmt
    else:
        if rate == -1:
            return Err(
                ErrorKind.UNDEFINED_RESULT,
                "Number of periods is undefined at a -100% rate",
            )
        denominator = pmt + pv * rate
        if denominator == 0:
            return Err(
                ErrorKind.UNDEFINED_RESULT,
                "Payment exactly offsets the periodic interest; the balance never changes",
            )
        ratio = (pmt - fv * rate) / denominator
        if not math.isfinite(ratio):
            return _overflow("Number of periods")
        if ratio <= 0:
            return Err(
                ErrorKind.UNDEFINED_RESULT,
                "The payment can never reach the future value at this rate",
            )
        value = math.log(ratio) / math.log1p(rate)

    if not math.isfinite(value):
        return _overflow("Number of periods")
    if value <= 0:
        return Err(
            ErrorKind.UNDEFINED_RESULT,
            "No positive number of periods reconciles these cash flows",
        )
    return Ok(value)
