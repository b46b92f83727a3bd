"""
Shared enumerations for database models.

Mapped to database enums so that only valid values can be
stored, independent of Python-side validation.
"""

import enum


class ProductType(str, enum.Enum):
    TERM_DEPOSIT = "TERM_DEPOSIT"


class InterestModality(str, enum.Enum):
    """How often interest is paid out."""
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMIANNUAL = "SEMIANNUAL"
    AT_MATURITY = "AT_MATURITY"


class InvestmentStatus(str, enum.Enum):
    """ACTIVE is initial. CANCELLED and MATURED are terminal."""
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    MATURED = "MATURED"


class ScheduleEntryType(str, enum.Enum):
    INTEREST_PAYMENT = "INTEREST_PAYMENT"
    CAPITAL_RETURN = "CAPITAL_RETURN"


class ScheduleEntryStatus(str, enum.Enum):
    PENDING = "PENDING"
    EXECUTED = "EXECUTED"


class MovementType(str, enum.Enum):
    OPENING = "OPENING"
    CANCELLATION = "CANCELLATION"
    MATURITY_SETTLEMENT = "MATURITY_SETTLEMENT"


class AccountStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    FROZEN = "FROZEN"
    CLOSED = "CLOSED"


class TransactionType(str, enum.Enum):
    """Direction of a ledger transaction from the account's view."""
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class TransactionStatus(str, enum.Enum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
