"""
Maturity settlement service: pays out matured deposits.

Settling one investment:
1. Re-read it; anything but ACTIVE is a duplicate and fails
2. Compare-and-set ACTIVE -> MATURED and commit, before any
   amount is computed. This write is the only decision point:
   of two racing calls, exactly one wins it.
3. Compute capital + interest from the frozen rate
4. Credit the account
5. Record the settlement transaction and movement, then commit

If steps 3-5 fail, the investment stays MATURED with no payout.
That is raised as SettlementPartiallyAppliedError for manual
reconciliation and is never retried here, because re-running
the payout could credit the customer twice.

The sweep settles each matured investment independently and
collects failures instead of stopping at the first one.
"""

import logging
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from term_deposits.config import ProductConfig, get_product_config
from term_deposits.exceptions import (
    DependencyError,
    NotFoundError,
    SettlementPartiallyAppliedError,
    StateConflictError,
    TermDepositError,
    ValidationError,
)
from term_deposits.models.enums import (
    InvestmentStatus,
    MovementType,
    TransactionType,
)
from term_deposits.models.investment import Investment
from term_deposits.schemas.settlement import (
    MaturityProjection,
    SettlementResult,
    SweepError,
    SweepItem,
    SweepReport,
)
from term_deposits.services.account_gateway import AccountGateway
from term_deposits.services.calculator import DAYS_IN_YEAR, normalize_rate
from term_deposits.services.investment_service import InvestmentService
from term_deposits.services.transaction_ledger import TransactionLedger

logger = logging.getLogger(__name__)


SETTLEMENT_DESCRIPTION = "Liquidación de Plazo Fijo"

# Balance column precision
MONEY = Decimal("0.0001")


def settlement_interest(
    capital: Decimal, stored_rate: Decimal, term_days: int
) -> Decimal:
    """Interest paid at maturity, from the rate as stored on the investment."""
    interest = capital * normalize_rate(stored_rate) * term_days / DAYS_IN_YEAR
    return interest.quantize(MONEY, rounding=ROUND_HALF_UP)


class MaturitySettlementService:

    def __init__(
        self,
        db: Session,
        config: ProductConfig | None = None,
        accounts: AccountGateway | None = None,
        ledger: TransactionLedger | None = None,
    ):
        self.db = db
        self.config = config or get_product_config()
        self.accounts = accounts or AccountGateway(db)
        self.ledger = ledger or TransactionLedger(db)
        self.investments = InvestmentService(
            db, self.config, accounts=self.accounts, ledger=self.ledger
        )

    def find_matured(self, as_of: date) -> list[uuid.UUID]:
        """Ids of ACTIVE investments maturing on or before as_of."""
        ids = self.db.execute(
            select(Investment.id)
            .where(
                Investment.status == InvestmentStatus.ACTIVE,
                Investment.maturity_date <= as_of,
            )
            .order_by(Investment.maturity_date, Investment.created_at)
        ).scalars().all()
        return list(ids)

    def run_sweep(self, as_of: date | None = None) -> SweepReport:
        """
        Settle every matured ACTIVE investment.

        Always returns a report; per-item failures land in errors.
        """
        as_of = as_of or date.today()
        matured = self.find_matured(as_of)
        report = SweepReport(total=len(matured))
        logger.info(
            "Maturity sweep as of %s: %d investments to settle",
            as_of, len(matured),
        )

        for investment_id in matured:
            try:
                result = self.settle_one(investment_id, as_of=as_of)
            except TermDepositError as e:
                logger.error(
                    "Settlement of investment %s failed: %s", investment_id, e
                )
                report.errors.append(SweepError(
                    id=investment_id,
                    error=str(e),
                    error_type=type(e).__name__,
                    partially_applied=isinstance(
                        e, SettlementPartiallyAppliedError
                    ),
                ))
                continue

            investment = self.db.get(Investment, investment_id)
            report.processed.append(SweepItem(
                id=investment_id,
                principal=investment.principal,
                maturity_date=investment.maturity_date,
                total=result.total,
            ))

        logger.info(
            "Maturity sweep finished: %d settled, %d errors",
            len(report.processed), len(report.errors),
        )
        return report

    def settle_one(
        self, investment_id: uuid.UUID, as_of: date | None = None
    ) -> SettlementResult:
        """
        Settle a single investment, guarded against double payment.

        Also used for manual re-triggers; an ACTIVE investment that
        has not reached maturity is settled with a warning.
        """
        as_of = as_of or date.today()

        try:
            investment = self.db.get(
                Investment, investment_id, populate_existing=True
            )
        except SQLAlchemyError as e:
            raise DependencyError(f"Investment store unavailable: {e}") from e
        if not investment:
            raise NotFoundError(f"Investment {investment_id} not found")

        if investment.status != InvestmentStatus.ACTIVE:
            logger.warning(
                "Duplicate settlement attempt for investment %s (status: %s)",
                investment_id, investment.status.value,
            )
            raise StateConflictError(
                f"Investment {investment_id} was already processed "
                f"(status: {investment.status.value})"
            )

        if investment.maturity_date > as_of:
            logger.warning(
                "Settling investment %s before its maturity date %s",
                investment_id, investment.maturity_date,
            )

        self._mark_matured(investment_id)
        logger.info("Investment %s marked MATURED", investment_id)

        try:
            result = self._pay_out(investment)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(
                "Investment %s is MATURED but its payout failed; "
                "manual reconciliation required: %s",
                investment_id, e,
            )
            raise SettlementPartiallyAppliedError(investment_id, e) from e

        logger.info(
            "Settled investment %s: capital=%s interest=%s total=%s",
            investment_id, result.capital, result.interest, result.total,
        )
        return result

    def _mark_matured(self, investment_id: uuid.UUID) -> None:
        """Commit the ACTIVE -> MATURED compare-and-set on its own."""
        try:
            won = self.investments.transition(
                investment_id,
                InvestmentStatus.ACTIVE,
                InvestmentStatus.MATURED,
            )
            if won:
                self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DependencyError(
                f"Could not mark investment {investment_id} as matured: {e}"
            ) from e

        if not won:
            self.db.rollback()
            logger.warning(
                "Investment %s lost the settlement race; already processed",
                investment_id,
            )
            raise StateConflictError(
                f"Investment {investment_id} was already processed"
            )

    def _pay_out(self, investment: Investment) -> SettlementResult:
        capital = Decimal(investment.principal)
        interest = settlement_interest(
            capital, investment.interest_rate, investment.term_days
        )
        total = capital + interest

        account = self.accounts.find_by_id(investment.account_id)
        if not account:
            raise NotFoundError(
                f"Account {investment.account_id} for investment "
                f"{investment.id} not found"
            )

        previous_balance = Decimal(account.available_balance)
        new_balance = previous_balance + total
        self.accounts.update_balance(account.id, new_balance)

        movement = self.investments.record_movement(
            investment,
            MovementType.MATURITY_SETTLEMENT,
            TransactionType.CREDIT,
            total,
            SETTLEMENT_DESCRIPTION,
        )

        return SettlementResult(
            id=investment.id,
            capital=capital,
            interest=interest,
            total=total,
            previous_balance=previous_balance,
            new_balance=new_balance,
            transaction_id=movement.transaction_id,
            settlement_timestamp=datetime.utcnow(),
        )

    def upcoming_maturities(
        self,
        lookahead_days: int | None = None,
        as_of: date | None = None,
    ) -> list[MaturityProjection]:
        """
        ACTIVE investments maturing within the lookahead window.

        Read-only. Projections use the frozen rate with the same
        normalisation as settlement, so they match the real payout.
        """
        if lookahead_days is None:
            lookahead_days = self.config.default_lookahead_days
        if lookahead_days < 0:
            raise ValidationError(
                "Lookahead must be zero or more days",
                reason="invalid_lookahead",
            )

        as_of = as_of or date.today()
        until = as_of + timedelta(days=lookahead_days)

        investments = self.db.execute(
            select(Investment)
            .where(
                Investment.status == InvestmentStatus.ACTIVE,
                Investment.maturity_date >= as_of,
                Investment.maturity_date <= until,
            )
            .order_by(Investment.maturity_date)
        ).scalars().all()

        projections = []
        for investment in investments:
            interest = settlement_interest(
                investment.principal,
                investment.interest_rate,
                investment.term_days,
            )
            projections.append(MaturityProjection(
                id=investment.id,
                account_id=investment.account_id,
                principal=investment.principal,
                interest_rate=investment.interest_rate,
                projected_interest=interest,
                projected_total=investment.principal + interest,
                maturity_date=investment.maturity_date,
                days_remaining=(investment.maturity_date - as_of).days,
            ))
        return projections
