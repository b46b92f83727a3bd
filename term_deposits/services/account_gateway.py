"""
Account gateway: the engine's only door to account balances.

Accounts are owned by the core banking side. The engine reads
them and asks for balance updates; storage failures surface
as DependencyError.
"""

from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from term_deposits.exceptions import DependencyError, NotFoundError
from term_deposits.models.account import Account


class AccountGateway:

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, account_id: int) -> Account | None:
        try:
            return self.db.get(Account, account_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise DependencyError(f"Account store unavailable: {e}") from e

    def update_balance(self, account_id: int, new_balance: Decimal) -> Account:
        """Overwrite the available balance. The caller computes the value."""
        account = self.find_by_id(account_id)
        if not account:
            raise NotFoundError(f"Account {account_id} not found")

        try:
            account.available_balance = new_balance
            self.db.flush()
        except SQLAlchemyError as e:
            raise DependencyError(
                f"Could not update balance of account {account_id}: {e}"
            ) from e
        return account
