"""
Schedule generator: planned interest and capital payments.

Builds the ScheduleEntry rows for a freshly opened investment.
The caller persists them as one batch.

Amounts are whole currency units because the column is an
integer. Periodic payments divide total interest by an
approximate period count, ceil(term_days / 30 / interval), so
the periodic amounts do not always sum to the total interest.
The schedule is display-only; settlement never reads it.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from dateutil.relativedelta import relativedelta

from term_deposits.models.enums import (
    InterestModality,
    ScheduleEntryType,
    ScheduleEntryStatus,
)
from term_deposits.models.investment import Investment
from term_deposits.models.schedule_entry import ScheduleEntry
from term_deposits.services.calculator import simple_interest


INTERVAL_MONTHS = {
    InterestModality.MONTHLY: 1,
    InterestModality.QUARTERLY: 3,
    InterestModality.SEMIANNUAL: 6,
}

APPROX_DAYS_PER_MONTH = 30


def to_whole_units(amount: Decimal) -> int:
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def payment_dates(
    opening_date: date, maturity_date: date, interval_months: int
) -> list[date]:
    """
    Every interval after opening, strictly before maturity.

    Each date is opening + k intervals (clamped to month end), so an
    opening on the 31st does not drift after a short month.
    """
    dates = []
    k = 1
    payment_date = opening_date + relativedelta(months=interval_months)
    while payment_date < maturity_date:
        dates.append(payment_date)
        k += 1
        payment_date = opening_date + relativedelta(months=interval_months * k)
    return dates


class ScheduleGenerator:

    def generate(
        self, investment: Investment, rate: Decimal
    ) -> list[ScheduleEntry]:
        """Return unsaved, PENDING schedule entries for the investment."""
        total_interest = simple_interest(
            investment.principal, rate, investment.term_days
        )
        entries = []

        interval = INTERVAL_MONTHS.get(investment.interest_modality)
        if interval:
            # ceil(term_days / 30 / interval) in integer arithmetic
            periods = -(-investment.term_days // (APPROX_DAYS_PER_MONTH * interval))
            amount = to_whole_units(total_interest / periods)
            for payment_date in payment_dates(
                investment.opening_date, investment.maturity_date, interval
            ):
                entries.append(self._entry(
                    investment,
                    ScheduleEntryType.INTEREST_PAYMENT,
                    payment_date,
                    amount,
                ))

        entries.append(self._entry(
            investment,
            ScheduleEntryType.CAPITAL_RETURN,
            investment.maturity_date,
            to_whole_units(Decimal(investment.principal)),
        ))

        if investment.interest_modality == InterestModality.AT_MATURITY:
            entries.append(self._entry(
                investment,
                ScheduleEntryType.INTEREST_PAYMENT,
                investment.maturity_date,
                to_whole_units(total_interest),
            ))

        return entries

    def _entry(
        self,
        investment: Investment,
        entry_type: ScheduleEntryType,
        scheduled_date: date,
        amount: int,
    ) -> ScheduleEntry:
        return ScheduleEntry(
            investment_id=investment.id,
            entry_type=entry_type,
            scheduled_date=scheduled_date,
            scheduled_amount=amount,
            status=ScheduleEntryStatus.PENDING,
        )
