"""
Rate table and simulation endpoints.

Nothing here writes to the database.
"""

from decimal import Decimal

from fastapi import APIRouter, Query

from term_deposits.api.errors import to_http_exception
from term_deposits.exceptions import TermDepositError
from term_deposits.services.calculator import InvestmentCalculator
from term_deposits.services.rate_resolver import RateResolver
from term_deposits.schemas.simulation import (
    RateQuote,
    RateTableBand,
    Recommendation,
    SimulationRequest,
    SimulationResponse,
)

router = APIRouter(prefix="/investments", tags=["Simulator"])


@router.get("/rates", response_model=list[RateTableBand])
def get_rate_table():
    """The full rate table, grouped by term range."""
    return RateResolver().rate_table()


@router.get("/rates/quote", response_model=RateQuote)
def get_rate_quote(
    principal: Decimal = Query(gt=0),
    term_days: int = Query(gt=0),
):
    """The rate that applies to one principal and term."""
    return RateResolver().resolve(principal, term_days)


@router.post("/simulate", response_model=SimulationResponse)
def simulate(request: SimulationRequest):
    """Preview an investment plus longer-term alternatives."""
    calculator = InvestmentCalculator()
    try:
        simulation = calculator.simulate(request.principal, request.term_days)
        recommendations = calculator.recommendations(request.principal)
    except TermDepositError as e:
        raise to_http_exception(e)

    return SimulationResponse(
        simulation=simulation,
        recommendations=recommendations,
        limits=calculator.limits(),
    )


@router.get("/recommendations", response_model=list[Recommendation])
def get_recommendations(principal: Decimal = Query(gt=0)):
    """Same principal over the reference terms."""
    try:
        return InvestmentCalculator().recommendations(principal)
    except TermDepositError as e:
        raise to_http_exception(e)
