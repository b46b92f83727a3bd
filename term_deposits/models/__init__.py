"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from term_deposits.models.base import Base
from term_deposits.models.enums import (
    ProductType,
    InterestModality,
    InvestmentStatus,
    ScheduleEntryType,
    ScheduleEntryStatus,
    MovementType,
    AccountStatus,
    TransactionType,
    TransactionStatus,
)
from term_deposits.models.account import Account
from term_deposits.models.transaction import Transaction
from term_deposits.models.investment import Investment
from term_deposits.models.schedule_entry import ScheduleEntry
from term_deposits.models.movement import Movement

__all__ = [
    "Base",
    "ProductType",
    "InterestModality",
    "InvestmentStatus",
    "ScheduleEntryType",
    "ScheduleEntryStatus",
    "MovementType",
    "AccountStatus",
    "TransactionType",
    "TransactionStatus",
    "Account",
    "Transaction",
    "Investment",
    "ScheduleEntry",
    "Movement",
]
