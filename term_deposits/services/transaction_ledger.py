"""
Transaction ledger gateway.

Records the account-side transaction for every money movement
the engine makes. Amounts are passed as positive magnitudes and
stored signed: debits negative, credits positive.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from term_deposits.exceptions import DependencyError
from term_deposits.models.enums import TransactionType, TransactionStatus
from term_deposits.models.transaction import Transaction


class TransactionLedger:

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        account_id: int,
        amount: Decimal,
        transaction_type: TransactionType,
        description: str,
    ) -> Transaction:
        signed_amount = (
            -amount if transaction_type == TransactionType.DEBIT else amount
        )
        txn = Transaction(
            account_id=account_id,
            transaction_type=transaction_type,
            status=TransactionStatus.COMPLETED,
            amount=signed_amount,
            description=description,
            created_at=datetime.utcnow(),
        )
        try:
            self.db.add(txn)
            self.db.flush()
        except SQLAlchemyError as e:
            raise DependencyError(f"Could not record transaction: {e}") from e
        return txn

    def get_by_account(self, account_id: int) -> list[Transaction]:
        """Return all transactions for an account, oldest first."""
        txns = self.db.execute(
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.id)
        ).scalars().all()
        return list(txns)
