"""
Customer account model.

Accounts are owned by the core banking side. The engine only
reads the status and available balance and asks for balance
updates through the AccountGateway.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Numeric, Enum as SAEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from term_deposits.models.base import Base
from term_deposits.models.enums import AccountStatus


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    holder_name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[AccountStatus] = mapped_column(
        SAEnum(
            AccountStatus,
            name="account_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD"
    )
    available_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"<Account {self.external_id} "
            f"{self.available_balance} {self.currency} ({self.status.value})>"
        )
