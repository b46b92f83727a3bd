"""
Maturity settlement endpoints.

The sweep is meant to be triggered by an external scheduler.
Settlement commits on its own, so these endpoints do not
commit or roll back.
"""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from term_deposits.api.errors import to_http_exception
from term_deposits.exceptions import TermDepositError
from term_deposits.models.base import get_db
from term_deposits.services.maturity_service import MaturitySettlementService
from term_deposits.schemas.settlement import (
    MaturityProjection,
    SettlementResult,
    SweepReport,
)

router = APIRouter(prefix="/maturities", tags=["Maturities"])


@router.post("/sweep", response_model=SweepReport)
def run_sweep(
    as_of: date | None = None,
    db: Session = Depends(get_db),
):
    """Settle every matured active investment."""
    return MaturitySettlementService(db).run_sweep(as_of)


@router.post("/{investment_id}/settle", response_model=SettlementResult)
def settle_investment(
    investment_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """Manually settle one investment. Fails with 409 if already processed."""
    service = MaturitySettlementService(db)
    try:
        return service.settle_one(investment_id)
    except TermDepositError as e:
        raise to_http_exception(e)


@router.get("/upcoming", response_model=list[MaturityProjection])
def upcoming_maturities(
    days: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    """Active investments maturing within the next `days` days."""
    service = MaturitySettlementService(db)
    try:
        return service.upcoming_maturities(days)
    except TermDepositError as e:
        raise to_http_exception(e)
