"""
Term deposit investment model.

Principal, term and interest rate are fixed at creation.
The rate is resolved once from the rate table and frozen here,
so later table changes never affect an open investment.

Status only moves forward: ACTIVE -> CANCELLED or
ACTIVE -> MATURED. Terminal states have no way out.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean, Date, DateTime, Integer, Numeric, ForeignKey,
    Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from term_deposits.models.base import Base
from term_deposits.models.enums import (
    ProductType,
    InterestModality,
    InvestmentStatus,
)


VALID_TRANSITIONS: dict[InvestmentStatus, set[InvestmentStatus]] = {
    InvestmentStatus.ACTIVE: {
        InvestmentStatus.CANCELLED,
        InvestmentStatus.MATURED,
    },
    InvestmentStatus.CANCELLED: set(),
    InvestmentStatus.MATURED: set(),
}


class Investment(Base):
    __tablename__ = "investments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    product_type: Mapped[ProductType] = mapped_column(
        SAEnum(ProductType, name="product_type_enum", create_constraint=True),
        nullable=False,
        default=ProductType.TERM_DEPOSIT,
    )
    principal: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    term_days: Mapped[int] = mapped_column(Integer, nullable=False)
    interest_modality: Mapped[InterestModality] = mapped_column(
        SAEnum(
            InterestModality,
            name="interest_modality_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    interest_rate: Mapped[Decimal] = mapped_column(
        Numeric(9, 4), nullable=False
    )
    opening_date: Mapped[date] = mapped_column(Date, nullable=False)
    maturity_date: Mapped[date] = mapped_column(
        Date, nullable=False, index=True
    )
    auto_renew: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    status: Mapped[InvestmentStatus] = mapped_column(
        SAEnum(
            InvestmentStatus,
            name="investment_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=InvestmentStatus.ACTIVE,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    schedule_entries: Mapped[list["ScheduleEntry"]] = relationship(
        back_populates="investment",
        order_by="ScheduleEntry.scheduled_date",
    )
    movements: Mapped[list["Movement"]] = relationship(
        back_populates="investment",
        order_by="Movement.id",
    )

    def can_transition_to(self, new_status: InvestmentStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __repr__(self) -> str:
        return (
            f"<Investment {self.id} {self.principal} "
            f"{self.term_days}d ({self.status.value})>"
        )
