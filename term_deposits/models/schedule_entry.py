"""
Payment schedule entry model.

Entries are generated in one batch when an investment opens.
The schedule is advisory: settlement recomputes interest from
the frozen rate instead of reading these rows, and nothing
currently marks an entry EXECUTED.
"""

import uuid
from datetime import date

from sqlalchemy import Date, Integer, ForeignKey, Enum as SAEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from term_deposits.models.base import Base
from term_deposits.models.enums import ScheduleEntryType, ScheduleEntryStatus


class ScheduleEntry(Base):
    __tablename__ = "investment_schedule_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    investment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("investments.id"), nullable=False, index=True
    )
    entry_type: Mapped[ScheduleEntryType] = mapped_column(
        SAEnum(
            ScheduleEntryType,
            name="schedule_entry_type_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    # Whole currency units only
    scheduled_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ScheduleEntryStatus] = mapped_column(
        SAEnum(
            ScheduleEntryStatus,
            name="schedule_entry_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=ScheduleEntryStatus.PENDING,
    )

    investment: Mapped["Investment"] = relationship(
        back_populates="schedule_entries"
    )

    def __repr__(self) -> str:
        return (
            f"<ScheduleEntry {self.entry_type.value} "
            f"{self.scheduled_date} {self.scheduled_amount}>"
        )
