"""
Translate service errors into HTTP errors.

Routers catch TermDepositError, roll back, and raise the
HTTPException built here.
"""

from fastapi import HTTPException

from term_deposits.exceptions import (
    DependencyError,
    NotFoundError,
    SettlementPartiallyAppliedError,
    StateConflictError,
    TermDepositError,
    ValidationError,
)


def to_http_exception(error: TermDepositError) -> HTTPException:
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=400,
            detail={"reason": error.reason, "message": str(error)},
        )
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, StateConflictError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, SettlementPartiallyAppliedError):
        return HTTPException(
            status_code=500,
            detail={
                "reason": "settlement_partially_applied",
                "investment_id": str(error.investment_id),
                "message": str(error),
            },
        )
    if isinstance(error, DependencyError):
        return HTTPException(status_code=503, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
