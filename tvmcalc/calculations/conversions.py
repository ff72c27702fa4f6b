"""
Rate Conversions

Calculator forms take an annual percentage; the solvers work in periodic
fractions. These helpers translate between the two.
"""

DEFAULT_PERIODS_PER_YEAR = 12


def _check_periods_per_year(periods_per_year: int) -> None:
    if periods_per_year < 1:
        raise ValueError("periods_per_year must be at least 1")


def periodic_rate_from_annual_percent(
    annual_percent: float, periods_per_year: int = DEFAULT_PERIODS_PER_YEAR
) -> float:
    """Convert a nominal annual percentage (7 = 7%) to a periodic fraction."""
    _check_periods_per_year(periods_per_year)
    return annual_percent / 100 / periods_per_year


def annual_percent_from_periodic_rate(
    periodic_rate: float, periods_per_year: int = DEFAULT_PERIODS_PER_YEAR
) -> float:
    """Convert a periodic fraction to a nominal annual percentage."""
    _check_periods_per_year(periods_per_year)
    return periodic_rate * periods_per_year * 100


def effective_annual_rate(
    periodic_rate: float, periods_per_year: int = DEFAULT_PERIODS_PER_YEAR
) -> float:
    """Convert a periodic rate to an effective annual rate (decimal)."""
    _check_periods_per_year(periods_per_year)
    return ((1 + periodic_rate) ** periods_per_year) - 1
