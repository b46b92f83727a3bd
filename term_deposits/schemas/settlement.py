"""
Pydantic schemas for maturity settlement results and reports.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SettlementResult(BaseModel):
    """Outcome of settling one investment."""
    id: uuid.UUID
    capital: Decimal
    interest: Decimal
    total: Decimal
    previous_balance: Decimal
    new_balance: Decimal
    transaction_id: int
    settlement_timestamp: datetime


class SweepItem(BaseModel):
    id: uuid.UUID
    principal: Decimal
    maturity_date: date
    total: Decimal | None = None


class SweepError(BaseModel):
    id: uuid.UUID
    error: str
    error_type: str
    partially_applied: bool = False


class SweepReport(BaseModel):
    """Aggregate of a batch sweep; one item's failure never aborts the rest."""
    processed: list[SweepItem] = Field(default_factory=list)
    errors: list[SweepError] = Field(default_factory=list)
    total: int = 0


class MaturityProjection(BaseModel):
    """Read-only projection of an investment that matures soon."""
    id: uuid.UUID
    account_id: int
    principal: Decimal
    interest_rate: Decimal
    projected_interest: Decimal
    projected_total: Decimal
    maturity_date: date
    days_remaining: int
