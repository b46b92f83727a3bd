"""
Tests for the MaturitySettlementService.

Covers single settlement, the batch sweep, duplicate and racing
settlement attempts, partial application, and the near-maturity
report.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import delete

from term_deposits.config import ProductConfig
from term_deposits.exceptions import (
    DependencyError,
    NotFoundError,
    SettlementPartiallyAppliedError,
    StateConflictError,
    ValidationError,
)
from term_deposits.models.account import Account
from term_deposits.models.enums import (
    InvestmentStatus,
    MovementType,
    ScheduleEntryStatus,
    TransactionType,
)
from term_deposits.models.transaction import Transaction
from term_deposits.schemas.investment import InvestmentCreate
from term_deposits.services.investment_service import InvestmentService
from term_deposits.services.maturity_service import (
    SETTLEMENT_DESCRIPTION,
    MaturitySettlementService,
    settlement_interest,
)
from term_deposits.services.transaction_ledger import TransactionLedger


OPENED = date(2026, 1, 1)
# OPENED + 90 days
MATURES = date(2026, 4, 1)


def open_deposit(db_session, config, account_id, principal="500",
                 term_days=90, opening_date=OPENED):
    investment = InvestmentService(db_session, config).create_investment(
        InvestmentCreate(
            account_id=account_id,
            principal=Decimal(principal),
            term_days=term_days,
        ),
        opening_date=opening_date,
    )
    db_session.commit()
    return investment


def balance_of(db_session, account_id):
    return db_session.get(Account, account_id, populate_existing=True).available_balance


class FailingLedger(TransactionLedger):
    """A ledger whose writes always fail."""

    def create(self, account_id, amount, transaction_type, description):
        raise DependencyError("ledger unavailable")


# --- Interest Tests ---

class TestSettlementInterest:

    def test_percentage_rate(self):
        assert settlement_interest(Decimal("500"), Decimal("2.65"), 90) == Decimal("3.3125")

    @pytest.mark.parametrize("rate, expected", [
        # Rates of 1 or less are read as fractions
        ("0.5", "500"),
        ("1", "1000"),
        ("1.5", "15"),
    ])
    def test_rate_normalisation(self, rate, expected):
        assert settlement_interest(Decimal("1000"), Decimal(rate), 360) == Decimal(expected)

    def test_rounds_to_four_places(self):
        interest = settlement_interest(Decimal("1000"), Decimal("2.85"), 61)
        assert interest == Decimal("4.8292")


# --- Single Settlement Tests ---

class TestSettleOne:

    def test_settles_matured_investment(self, db_session, make_account, flat_rate_config):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)
        assert balance_of(db_session, account.id) == Decimal("500.00")

        service = MaturitySettlementService(db_session, flat_rate_config)
        result = service.settle_one(investment.id, as_of=MATURES)

        assert result.capital == Decimal("500")
        assert result.interest == Decimal("3.3125")
        assert result.total == Decimal("503.3125")
        assert result.previous_balance == Decimal("500")
        assert result.new_balance == Decimal("1003.3125")
        assert balance_of(db_session, account.id) == Decimal("1003.3125")
        assert service.investments.get_investment(investment.id).status == InvestmentStatus.MATURED

    def test_records_settlement_transaction(self, db_session, make_account, flat_rate_config):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)

        service = MaturitySettlementService(db_session, flat_rate_config)
        result = service.settle_one(investment.id, as_of=MATURES)

        txn = db_session.get(Transaction, result.transaction_id)
        assert txn.transaction_type == TransactionType.CREDIT
        assert txn.amount == Decimal("503.3125")
        assert txn.description == SETTLEMENT_DESCRIPTION

        movements = service.investments.get_movements(investment.id)
        assert [m.movement_type for m in movements] == [
            MovementType.OPENING,
            MovementType.MATURITY_SETTLEMENT,
        ]

    def test_second_settlement_rejected(self, db_session, make_account, flat_rate_config):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)
        service = MaturitySettlementService(db_session, flat_rate_config)
        service.settle_one(investment.id, as_of=MATURES)

        with pytest.raises(StateConflictError, match="already processed"):
            service.settle_one(investment.id, as_of=MATURES)
        assert balance_of(db_session, account.id) == Decimal("1003.3125")

    @pytest.mark.parametrize("rate, payout", [
        ("0.5", "1500"),
        ("1", "2000"),
        ("1.5", "1015"),
    ])
    def test_uses_stored_rate(self, db_session, make_account, rate, payout):
        account = make_account("1000.00")
        config = ProductConfig(tiers=[], default_rate=Decimal(rate))
        investment = open_deposit(
            db_session, config, account.id, "1000", term_days=360
        )
        assert investment.interest_rate == Decimal(rate)

        MaturitySettlementService(db_session, config).settle_one(
            investment.id, as_of=date(2026, 12, 27)
        )
        assert balance_of(db_session, account.id) == Decimal(payout)

    def test_unknown_investment(self, db_session):
        service = MaturitySettlementService(db_session, ProductConfig())

        with pytest.raises(NotFoundError):
            service.settle_one(uuid.uuid4())

    def test_cancelled_investment_rejected(self, db_session, make_account):
        account = make_account("1000.00")
        config = ProductConfig()
        investment = open_deposit(db_session, config, account.id)
        InvestmentService(db_session, config).cancel_investment(investment.id)
        db_session.commit()

        with pytest.raises(StateConflictError, match="CANCELLED"):
            MaturitySettlementService(db_session, config).settle_one(
                investment.id, as_of=MATURES
            )
        assert balance_of(db_session, account.id) == Decimal("1000.00")

    def test_early_settlement_warns(self, db_session, make_account, flat_rate_config, caplog):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)
        service = MaturitySettlementService(db_session, flat_rate_config)

        with caplog.at_level(logging.WARNING):
            result = service.settle_one(investment.id, as_of=date(2026, 2, 1))

        assert "before its maturity date" in caplog.text
        # Interest still covers the full term
        assert result.interest == Decimal("3.3125")

    def test_schedule_is_not_touched(self, db_session, make_account, flat_rate_config):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)
        service = MaturitySettlementService(db_session, flat_rate_config)
        service.settle_one(investment.id, as_of=MATURES)

        entries = service.investments.get_schedule(investment.id)
        assert entries
        assert all(e.status == ScheduleEntryStatus.PENDING for e in entries)


# --- Failure Tests ---

class TestPartialSettlement:

    def test_ledger_failure_leaves_matured_without_payout(
        self, db_session, make_account, flat_rate_config
    ):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)
        service = MaturitySettlementService(
            db_session, flat_rate_config, ledger=FailingLedger(db_session)
        )

        with pytest.raises(SettlementPartiallyAppliedError) as exc_info:
            service.settle_one(investment.id, as_of=MATURES)

        assert exc_info.value.investment_id == investment.id
        assert balance_of(db_session, account.id) == Decimal("500.00")
        assert service.investments.get_investment(investment.id).status == InvestmentStatus.MATURED

    def test_partial_settlement_is_not_retried(
        self, db_session, make_account, flat_rate_config
    ):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)
        failing = MaturitySettlementService(
            db_session, flat_rate_config, ledger=FailingLedger(db_session)
        )
        with pytest.raises(SettlementPartiallyAppliedError):
            failing.settle_one(investment.id, as_of=MATURES)

        healthy = MaturitySettlementService(db_session, flat_rate_config)
        with pytest.raises(StateConflictError):
            healthy.settle_one(investment.id, as_of=MATURES)
        assert healthy.run_sweep(as_of=MATURES).total == 0


# --- Concurrency Tests ---

class TestSettlementRace:

    def test_loser_of_race_pays_nothing(
        self, db_session, other_session, make_account, flat_rate_config, monkeypatch
    ):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)

        service = MaturitySettlementService(db_session, flat_rate_config)
        competitor = MaturitySettlementService(other_session, flat_rate_config)
        original_transition = service.investments.transition

        def settle_elsewhere_first(*args, **kwargs):
            # The competitor completes between our read and our write
            competitor.settle_one(investment.id, as_of=MATURES)
            return original_transition(*args, **kwargs)

        monkeypatch.setattr(
            service.investments, "transition", settle_elsewhere_first
        )

        with pytest.raises(StateConflictError, match="already processed"):
            service.settle_one(investment.id, as_of=MATURES)

        assert balance_of(db_session, account.id) == Decimal("1003.3125")
        credits = db_session.query(Transaction).filter(
            Transaction.transaction_type == TransactionType.CREDIT
        ).count()
        assert credits == 1


# --- Sweep Tests ---

class TestRunSweep:

    def test_sweep_settles_only_matured(self, db_session, make_account, flat_rate_config):
        account = make_account("2000.00")
        matured = open_deposit(db_session, flat_rate_config, account.id)
        pending = open_deposit(
            db_session, flat_rate_config, account.id, opening_date=date(2026, 2, 1)
        )

        report = MaturitySettlementService(db_session, flat_rate_config).run_sweep(
            as_of=MATURES
        )

        assert report.total == 1
        assert [item.id for item in report.processed] == [matured.id]
        assert report.processed[0].total == Decimal("503.3125")
        assert report.errors == []
        assert pending.status == InvestmentStatus.ACTIVE

    def test_sweep_isolates_failures(self, db_session, make_account, flat_rate_config):
        healthy_account = make_account("1500.00")
        doomed_account = make_account("1000.00", name="Luis Torres")
        healthy = open_deposit(db_session, flat_rate_config, healthy_account.id)
        doomed = open_deposit(
            db_session, flat_rate_config, doomed_account.id,
            opening_date=date(2025, 12, 1),
        )
        not_yet = open_deposit(
            db_session, flat_rate_config, healthy_account.id,
            opening_date=date(2026, 3, 1),
        )
        db_session.execute(delete(Account).where(Account.id == doomed_account.id))
        db_session.commit()

        service = MaturitySettlementService(db_session, flat_rate_config)
        report = service.run_sweep(as_of=MATURES)

        assert report.total == 2
        assert [item.id for item in report.processed] == [healthy.id]
        assert len(report.errors) == 1
        error = report.errors[0]
        assert error.id == doomed.id
        assert error.partially_applied is True
        assert error.error_type == "SettlementPartiallyAppliedError"
        assert balance_of(db_session, healthy_account.id) == Decimal("1003.3125")
        assert service.investments.get_investment(not_yet.id).status == InvestmentStatus.ACTIVE

    def test_second_sweep_finds_nothing(self, db_session, make_account, flat_rate_config):
        account = make_account("1000.00")
        open_deposit(db_session, flat_rate_config, account.id)
        service = MaturitySettlementService(db_session, flat_rate_config)

        assert service.run_sweep(as_of=MATURES).total == 1
        report = service.run_sweep(as_of=MATURES)

        assert report.total == 0
        assert report.processed == []
        assert balance_of(db_session, account.id) == Decimal("1003.3125")

    def test_empty_sweep(self, db_session):
        report = MaturitySettlementService(db_session, ProductConfig()).run_sweep(
            as_of=MATURES
        )
        assert report.total == 0
        assert report.errors == []


# --- Near-maturity Report Tests ---

class TestUpcomingMaturities:

    def test_lookahead_window(self, db_session, make_account, flat_rate_config):
        account = make_account("2000.00")
        # Matures 2026-04-01
        inside = open_deposit(db_session, flat_rate_config, account.id)
        # Matures 2026-04-08, the last day of the window
        edge = open_deposit(
            db_session, flat_rate_config, account.id, opening_date=date(2026, 1, 8)
        )
        # Matures 2026-04-09
        open_deposit(
            db_session, flat_rate_config, account.id, opening_date=date(2026, 1, 9)
        )

        projections = MaturitySettlementService(
            db_session, flat_rate_config
        ).upcoming_maturities(lookahead_days=7, as_of=MATURES)

        assert [p.id for p in projections] == [inside.id, edge.id]
        assert [p.days_remaining for p in projections] == [0, 7]
        assert projections[0].projected_interest == Decimal("3.3125")
        assert projections[0].projected_total == Decimal("503.3125")

    def test_excludes_non_active(self, db_session, make_account, flat_rate_config):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)
        InvestmentService(db_session, flat_rate_config).cancel_investment(investment.id)
        db_session.commit()

        projections = MaturitySettlementService(
            db_session, flat_rate_config
        ).upcoming_maturities(lookahead_days=30, as_of=date(2026, 3, 15))
        assert projections == []

    def test_report_does_not_settle(self, db_session, make_account, flat_rate_config):
        account = make_account("1000.00")
        investment = open_deposit(db_session, flat_rate_config, account.id)
        service = MaturitySettlementService(db_session, flat_rate_config)

        service.upcoming_maturities(lookahead_days=7, as_of=MATURES)

        assert service.investments.get_investment(investment.id).status == InvestmentStatus.ACTIVE
        assert balance_of(db_session, account.id) == Decimal("500.00")

    def test_negative_lookahead_rejected(self, db_session):
        service = MaturitySettlementService(db_session, ProductConfig())

        with pytest.raises(ValidationError) as exc_info:
            service.upcoming_maturities(lookahead_days=-1)
        assert exc_info.value.reason == "invalid_lookahead"
