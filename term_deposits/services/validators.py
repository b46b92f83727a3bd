"""
Pre-flight checks shared by simulation and investment creation.

Every check runs before any mutation and raises ValidationError
with a reason code a UI can turn into a message.
"""

from decimal import Decimal

from term_deposits.config import ProductConfig
from term_deposits.exceptions import ValidationError


def validate_principal(config: ProductConfig, principal: Decimal) -> None:
    if principal < config.min_principal:
        raise ValidationError(
            f"Principal {principal} is below the minimum of {config.min_principal}",
            reason="amount_below_minimum",
        )
    if principal > config.max_principal:
        raise ValidationError(
            f"Principal {principal} is above the maximum of {config.max_principal}",
            reason="amount_above_maximum",
        )


def validate_term(config: ProductConfig, term_days: int) -> None:
    if term_days < config.min_term_days:
        raise ValidationError(
            f"Term of {term_days} days is below the minimum of "
            f"{config.min_term_days} days",
            reason="term_below_minimum",
        )
    if term_days > config.max_term_days:
        raise ValidationError(
            f"Term of {term_days} days is above the maximum of "
            f"{config.max_term_days} days",
            reason="term_above_maximum",
        )


def validate_investment_terms(
    config: ProductConfig, principal: Decimal, term_days: int
) -> None:
    """Check both principal and term against the product bounds."""
    validate_principal(config, principal)
    validate_term(config, term_days)
