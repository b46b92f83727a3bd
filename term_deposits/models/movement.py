"""
Investment movement model.

A movement links an investment to the ledger transaction that
moved its money, with the business reason. Append-only.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Enum as SAEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from term_deposits.models.base import Base
from term_deposits.models.enums import MovementType


class Movement(Base):
    __tablename__ = "investment_movements"

    id: Mapped[int] = mapped_column(primary_key=True)
    investment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("investments.id"), nullable=False, index=True
    )
    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("transactions.id"), nullable=False, index=True
    )
    movement_type: Mapped[MovementType] = mapped_column(
        SAEnum(MovementType, name="movement_type_enum", create_constraint=True),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    investment: Mapped["Investment"] = relationship(back_populates="movements")
    transaction: Mapped["Transaction"] = relationship()

    def __repr__(self) -> str:
        return f"<Movement {self.movement_type.value} txn={self.transaction_id}>"
