"""
Investment service: opening, updating and cancelling deposits.

Creation runs in this order:
1. Validate bounds, account status and available balance
2. Resolve and freeze the rate
3. Persist the investment (ACTIVE)
4. Debit the account
5. Persist the payment schedule
6. Record the OPENING transaction and movement

Validation happens before any write. The service only flushes;
the caller owns the unit of work and decides when to commit,
so a failure at any step rolls back the whole opening.
"""

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from term_deposits.config import ProductConfig, get_product_config
from term_deposits.exceptions import (
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from term_deposits.models.account import Account
from term_deposits.models.enums import (
    InvestmentStatus,
    MovementType,
    ProductType,
    TransactionType,
)
from term_deposits.models.investment import Investment, VALID_TRANSITIONS
from term_deposits.models.movement import Movement
from term_deposits.models.schedule_entry import ScheduleEntry
from term_deposits.schemas.investment import (
    InvestmentCreate,
    InvestmentFilters,
    InvestmentUpdate,
)
from term_deposits.services.account_gateway import AccountGateway
from term_deposits.services.calculator import maturity_date, to_cents
from term_deposits.services.rate_resolver import RateResolver
from term_deposits.services.schedule_generator import ScheduleGenerator
from term_deposits.services.transaction_ledger import TransactionLedger
from term_deposits.services.validators import validate_investment_terms

logger = logging.getLogger(__name__)


OPENING_DESCRIPTION = "Apertura de Plazo Fijo"
CANCELLATION_DESCRIPTION = "Cancelación de Plazo Fijo"


class InvestmentService:

    def __init__(
        self,
        db: Session,
        config: ProductConfig | None = None,
        accounts: AccountGateway | None = None,
        ledger: TransactionLedger | None = None,
    ):
        self.db = db
        self.config = config or get_product_config()
        self.rate_resolver = RateResolver(self.config)
        self.schedule_generator = ScheduleGenerator()
        self.accounts = accounts or AccountGateway(db)
        self.ledger = ledger or TransactionLedger(db)

    def _get_active_account(self, account_id: int) -> Account:
        account = self.accounts.find_by_id(account_id)
        if not account:
            raise NotFoundError(f"Account {account_id} not found")
        if not account.is_active:
            raise StateConflictError(
                f"Account {account_id} is not active "
                f"(status: {account.status.value})"
            )
        return account

    def create_investment(
        self,
        request: InvestmentCreate,
        opening_date: date | None = None,
    ) -> Investment:
        """Open a term deposit funded from the given account."""
        validate_investment_terms(
            self.config, request.principal, request.term_days
        )
        account = self._get_active_account(request.account_id)
        if account.available_balance < request.principal:
            raise ValidationError(
                f"Insufficient balance: available={account.available_balance}, "
                f"requested={request.principal}",
                reason="insufficient_balance",
            )

        quote = self.rate_resolver.resolve(request.principal, request.term_days)
        opened_on = opening_date or date.today()
        auto_renew = (
            request.auto_renew
            if request.auto_renew is not None
            else self.config.default_auto_renew
        )

        investment = Investment(
            id=uuid.uuid4(),
            account_id=account.id,
            product_type=ProductType.TERM_DEPOSIT,
            principal=request.principal,
            term_days=request.term_days,
            interest_modality=request.interest_modality,
            interest_rate=quote.rate,
            opening_date=opened_on,
            maturity_date=maturity_date(opened_on, request.term_days),
            auto_renew=auto_renew,
            status=InvestmentStatus.ACTIVE,
        )
        self.db.add(investment)
        self.db.flush()

        new_balance = to_cents(account.available_balance - request.principal)
        self.accounts.update_balance(account.id, new_balance)

        entries = self.schedule_generator.generate(investment, quote.rate)
        self.db.add_all(entries)
        self.db.flush()

        self.record_movement(
            investment,
            MovementType.OPENING,
            TransactionType.DEBIT,
            request.principal,
            OPENING_DESCRIPTION,
        )

        logger.info(
            "Opened investment %s: principal=%s term=%sd rate=%s%s",
            investment.id, investment.principal, investment.term_days,
            quote.rate, " (default rate)" if quote.is_default else "",
        )
        return investment

    def get_investment(self, investment_id: uuid.UUID) -> Investment:
        investment = self.db.get(Investment, investment_id)
        if not investment:
            raise NotFoundError(f"Investment {investment_id} not found")
        return investment

    def list_investments(
        self, filters: InvestmentFilters | None = None
    ) -> list[Investment]:
        """List investments, newest opening first."""
        query = select(Investment)
        if filters:
            if filters.status:
                query = query.where(Investment.status == filters.status)
            if filters.product_type:
                query = query.where(
                    Investment.product_type == filters.product_type
                )
            if filters.account_id is not None:
                query = query.where(Investment.account_id == filters.account_id)

        investments = self.db.execute(
            query.order_by(
                Investment.opening_date.desc(), Investment.created_at.desc()
            )
        ).scalars().all()
        return list(investments)

    def list_by_account(self, account_id: int) -> list[Investment]:
        return self.list_investments(InvestmentFilters(account_id=account_id))

    def update_investment(
        self, investment_id: uuid.UUID, request: InvestmentUpdate
    ) -> Investment:
        """
        Change the payout modality and/or auto-renew flag.

        The existing schedule is left untouched when the modality
        changes; it is not regenerated.
        """
        investment = self.get_investment(investment_id)
        if investment.status != InvestmentStatus.ACTIVE:
            raise StateConflictError(
                f"Only active investments can be updated "
                f"(status: {investment.status.value})"
            )
        if request.interest_modality is None and request.auto_renew is None:
            raise ValidationError(
                "Nothing to update: provide interest_modality or auto_renew",
                reason="invalid_update",
            )

        if request.interest_modality is not None:
            investment.interest_modality = request.interest_modality
        if request.auto_renew is not None:
            investment.auto_renew = request.auto_renew

        self.db.flush()
        logger.info("Updated investment %s", investment.id)
        return investment

    def cancel_investment(self, investment_id: uuid.UUID) -> Investment:
        """
        Cancel an active investment before maturity.

        The account gets back exactly the principal. Early
        termination forfeits all interest.
        """
        investment = self.get_investment(investment_id)
        if not investment.can_transition_to(InvestmentStatus.CANCELLED):
            raise StateConflictError(
                f"Only active investments can be cancelled "
                f"(status: {investment.status.value})"
            )

        account = self.accounts.find_by_id(investment.account_id)
        if not account:
            raise NotFoundError(f"Account {investment.account_id} not found")

        if not self.transition(
            investment.id, InvestmentStatus.ACTIVE, InvestmentStatus.CANCELLED
        ):
            raise StateConflictError(
                f"Investment {investment.id} was already processed"
            )

        self.accounts.update_balance(
            account.id, account.available_balance + investment.principal
        )
        self.record_movement(
            investment,
            MovementType.CANCELLATION,
            TransactionType.CREDIT,
            investment.principal,
            CANCELLATION_DESCRIPTION,
        )

        logger.info(
            "Cancelled investment %s, returned %s to account %s",
            investment.id, investment.principal, account.id,
        )
        return investment

    def transition(
        self,
        investment_id: uuid.UUID,
        expected_status: InvestmentStatus,
        new_status: InvestmentStatus,
    ) -> bool:
        """
        Compare-and-set the investment status.

        Issues UPDATE ... WHERE status = expected_status and reports
        whether this call won. Concurrent callers racing on the same
        investment see exactly one True.
        """
        if new_status not in VALID_TRANSITIONS[expected_status]:
            raise StateConflictError(
                f"Cannot transition from {expected_status.value} "
                f"to {new_status.value}"
            )

        result = self.db.execute(
            update(Investment)
            .where(
                Investment.id == investment_id,
                Investment.status == expected_status,
            )
            .values(status=new_status, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        won = result.rowcount == 1

        investment = self.db.get(Investment, investment_id)
        if investment is not None:
            self.db.refresh(investment)
        return won

    def get_schedule(self, investment_id: uuid.UUID) -> list[ScheduleEntry]:
        self.get_investment(investment_id)
        entries = self.db.execute(
            select(ScheduleEntry)
            .where(ScheduleEntry.investment_id == investment_id)
            .order_by(ScheduleEntry.scheduled_date, ScheduleEntry.id)
        ).scalars().all()
        return list(entries)

    def get_movements(self, investment_id: uuid.UUID) -> list[Movement]:
        self.get_investment(investment_id)
        movements = self.db.execute(
            select(Movement)
            .where(Movement.investment_id == investment_id)
            .order_by(Movement.id)
        ).scalars().all()
        return list(movements)

    def record_movement(
        self,
        investment: Investment,
        movement_type: MovementType,
        transaction_type: TransactionType,
        amount: Decimal,
        description: str,
    ) -> Movement:
        """Create the ledger transaction first, then the movement pointing at it."""
        txn = self.ledger.create(
            investment.account_id, amount, transaction_type, description
        )
        movement = Movement(
            investment_id=investment.id,
            transaction_id=txn.id,
            movement_type=movement_type,
        )
        self.db.add(movement)
        self.db.flush()
        return movement
