"""
Pydantic schemas for investment operations.

These define the API contract. Principal and term bounds are
product configuration and are checked by the service, not here;
the schemas only reject malformed shapes.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from term_deposits.models.enums import (
    ProductType,
    InterestModality,
    InvestmentStatus,
    ScheduleEntryType,
    ScheduleEntryStatus,
    MovementType,
)


# --- Request Schemas ---

class InvestmentCreate(BaseModel):
    """Request to open a term deposit."""
    account_id: int
    principal: Decimal = Field(gt=0, decimal_places=2)
    term_days: int = Field(gt=0)
    interest_modality: InterestModality = InterestModality.AT_MATURITY
    auto_renew: bool | None = None


class InvestmentUpdate(BaseModel):
    """Only the payout modality and auto-renew flag can change."""
    interest_modality: InterestModality | None = None
    auto_renew: bool | None = None


class InvestmentFilters(BaseModel):
    status: InvestmentStatus | None = None
    product_type: ProductType | None = None
    account_id: int | None = None


# --- Response Schemas ---

class InvestmentResponse(BaseModel):
    id: uuid.UUID
    account_id: int
    product_type: ProductType
    principal: Decimal
    term_days: int
    interest_modality: InterestModality
    interest_rate: Decimal
    opening_date: date
    maturity_date: date
    auto_renew: bool
    status: InvestmentStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class ScheduleEntryResponse(BaseModel):
    id: int
    investment_id: uuid.UUID
    entry_type: ScheduleEntryType
    scheduled_date: date
    scheduled_amount: int
    status: ScheduleEntryStatus

    model_config = {"from_attributes": True}


class MovementResponse(BaseModel):
    id: int
    investment_id: uuid.UUID
    transaction_id: int
    movement_type: MovementType
    created_at: datetime

    model_config = {"from_attributes": True}
