"""
Pydantic schemas for rate lookups and simulations.

Nothing here is persisted; these shapes only describe previews.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class RateQuote(BaseModel):
    """The rate that applies to a (principal, term) pair."""
    rate: Decimal
    is_default: bool = False
    message: str | None = None
    principal_min: Decimal | None = None
    principal_max: Decimal | None = None
    term_min: int | None = None
    term_max: int | None = None


class SimulationRequest(BaseModel):
    principal: Decimal = Field(gt=0, decimal_places=2)
    term_days: int = Field(gt=0)


class Simulation(BaseModel):
    principal: Decimal
    term_days: int
    rate: Decimal
    interest: Decimal
    final_amount: Decimal
    opening_date: date
    maturity_date: date


class Recommendation(BaseModel):
    term_days: int
    rate: Decimal
    interest: Decimal
    final_amount: Decimal


class ProductLimits(BaseModel):
    min_principal: Decimal
    max_principal: Decimal
    min_term_days: int
    max_term_days: int


class SimulationResponse(BaseModel):
    simulation: Simulation
    recommendations: list[Recommendation]
    limits: ProductLimits


class RateTableTier(BaseModel):
    principal_min: Decimal
    principal_max: Decimal | None
    rate: Decimal


class RateTableBand(BaseModel):
    """All tiers that share one term range."""
    label: str
    term_min: int
    term_max: int
    tiers: list[RateTableTier]
