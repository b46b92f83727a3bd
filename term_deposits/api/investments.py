"""
Investment API endpoints.

The API layer is thin: it owns the commit/rollback of each
request and delegates everything else to InvestmentService.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from term_deposits.api.errors import to_http_exception
from term_deposits.exceptions import TermDepositError
from term_deposits.models.base import get_db
from term_deposits.models.enums import InvestmentStatus, ProductType
from term_deposits.services.investment_service import InvestmentService
from term_deposits.schemas.investment import (
    InvestmentCreate,
    InvestmentFilters,
    InvestmentResponse,
    InvestmentUpdate,
    MovementResponse,
    ScheduleEntryResponse,
)

router = APIRouter(tags=["Investments"])


@router.post("/investments", response_model=InvestmentResponse, status_code=201)
def create_investment(
    request: InvestmentCreate,
    db: Session = Depends(get_db),
):
    """
    Open a term deposit.

    Debits the principal from the account, freezes the rate,
    and creates the payment schedule.
    """
    service = InvestmentService(db)
    try:
        investment = service.create_investment(request)
        db.commit()
        return investment
    except TermDepositError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get("/investments", response_model=list[InvestmentResponse])
def list_investments(
    status: InvestmentStatus | None = None,
    product_type: ProductType | None = None,
    account_id: int | None = None,
    db: Session = Depends(get_db),
):
    """List investments, newest first."""
    service = InvestmentService(db)
    return service.list_investments(InvestmentFilters(
        status=status,
        product_type=product_type,
        account_id=account_id,
    ))


@router.get(
    "/accounts/{account_id}/investments",
    response_model=list[InvestmentResponse],
)
def list_account_investments(
    account_id: int,
    db: Session = Depends(get_db),
):
    """All investments funded from one account."""
    return InvestmentService(db).list_by_account(account_id)


@router.get("/investments/{investment_id}", response_model=InvestmentResponse)
def get_investment(
    investment_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    service = InvestmentService(db)
    try:
        return service.get_investment(investment_id)
    except TermDepositError as e:
        raise to_http_exception(e)


@router.patch("/investments/{investment_id}", response_model=InvestmentResponse)
def update_investment(
    investment_id: uuid.UUID,
    request: InvestmentUpdate,
    db: Session = Depends(get_db),
):
    """Change modality or auto-renew. The schedule is not regenerated."""
    service = InvestmentService(db)
    try:
        investment = service.update_investment(investment_id, request)
        db.commit()
        return investment
    except TermDepositError as e:
        db.rollback()
        raise to_http_exception(e)


@router.post(
    "/investments/{investment_id}/cancel",
    response_model=InvestmentResponse,
)
def cancel_investment(
    investment_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """Cancel early. Returns the principal only, no interest."""
    service = InvestmentService(db)
    try:
        investment = service.cancel_investment(investment_id)
        db.commit()
        return investment
    except TermDepositError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get(
    "/investments/{investment_id}/schedule",
    response_model=list[ScheduleEntryResponse],
)
def get_schedule(
    investment_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    service = InvestmentService(db)
    try:
        return service.get_schedule(investment_id)
    except TermDepositError as e:
        raise to_http_exception(e)


@router.get(
    "/investments/{investment_id}/movements",
    response_model=list[MovementResponse],
)
def get_movements(
    investment_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    service = InvestmentService(db)
    try:
        return service.get_movements(investment_id)
    except TermDepositError as e:
        raise to_http_exception(e)
