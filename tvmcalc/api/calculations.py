"""
TVM calculation API endpoints.

These endpoints accept the four known fields of a scenario and return the
solved fifth. Rates are exchanged as annual percentages, the way the
calculator form collects them.
"""

import dataclasses
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Optional

from tvmcalc.calculations import conversions
from tvmcalc.calculations.rate import SolverConfig, solve
from tvmcalc.calculations.result import TVMError
from tvmcalc.calculations.tvm import CashFlowModel, SolveFor
from tvmcalc.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class TVMInput(BaseModel):
    """Input for a TVM solve."""

    solve_for: SolveFor

    # Known fields (the solved one is ignored)
    present_value: Optional[float] = None
    future_value: Optional[float] = None
    payment: Optional[float] = None
    number_of_periods: Optional[int] = None
    annual_rate: Optional[float] = None  # percent, e.g. 7 for 7%

    periods_per_year: Optional[int] = Field(default=None, ge=1)

    # Rate solver overrides
    initial_guess: Optional[float] = None
    max_iterations: Optional[int] = None
    tolerance: Optional[float] = None


class TVMResponse(BaseModel):
    """Response with the solved value."""

    solve_for: SolveFor
    value: float
    unit: str
    periodic_rate: Optional[float] = None


def _solver_config(inputs: TVMInput, settings: Settings) -> SolverConfig:
    overrides = {
        "initial_guess": inputs.initial_guess,
        "max_iterations": inputs.max_iterations,
        "tolerance": inputs.tolerance,
    }
    return dataclasses.replace(
        settings.solver_config(),
        **{k: v for k, v in overrides.items() if v is not None},
    )


@router.post("/tvm", response_model=TVMResponse)
async def calculate_tvm(inputs: TVMInput):
    """Solve a TVM scenario for the requested unknown."""
    settings = get_settings()
    periods_per_year = inputs.periods_per_year or settings.periods_per_year

    periodic_rate = None
    if inputs.annual_rate is not None:
        periodic_rate = conversions.periodic_rate_from_annual_percent(
            inputs.annual_rate, periods_per_year
        )

    model = CashFlowModel(
        present_value=inputs.present_value,
        future_value=inputs.future_value,
        payment=inputs.payment,
        number_of_periods=inputs.number_of_periods,
        periodic_rate=periodic_rate,
    )

    try:
        value = solve(
            inputs.solve_for, model, config=_solver_config(inputs, settings)
        ).unwrap()
    except TVMError as e:
        logger.info("TVM solve for %s failed: %s", inputs.solve_for.value, e.message)
        raise HTTPException(
            status_code=400,
            detail={"kind": e.kind.value, "message": e.message},
        )

    if inputs.solve_for == SolveFor.RATE:
        return TVMResponse(
            solve_for=inputs.solve_for,
            value=conversions.annual_percent_from_periodic_rate(value, periods_per_year),
            unit="percent",
            periodic_rate=value,
        )

    unit = "periods" if inputs.solve_for == SolveFor.NUMBER_OF_PERIODS else "currency"
    return TVMResponse(solve_for=inputs.solve_for, value=value, unit=unit)
