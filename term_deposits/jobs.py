"""
Command-line entry points for scheduled jobs.

Meant to be run by cron or another external scheduler:

    python -m term_deposits.jobs sweep
    python -m term_deposits.jobs sweep --as-of 2026-01-31
    python -m term_deposits.jobs upcoming --days 7

The sweep exits with status 1 when any investment failed;
an invalid lookahead exits with status 2.
"""

import argparse
import logging
import sys
from datetime import date

from term_deposits.config import get_settings
from term_deposits.exceptions import ValidationError
from term_deposits.logging_config import setup_logging
from term_deposits.models.base import SessionLocal
from term_deposits.services.maturity_service import MaturitySettlementService

logger = logging.getLogger(__name__)


def run_sweep(as_of: date | None = None) -> int:
    db = SessionLocal()
    try:
        report = MaturitySettlementService(db).run_sweep(as_of)
    finally:
        db.close()

    for error in report.errors:
        flag = " [PARTIALLY APPLIED]" if error.partially_applied else ""
        logger.error("  %s: %s%s", error.id, error.error, flag)

    return 1 if report.errors else 0


def list_upcoming(days: int | None = None) -> int:
    db = SessionLocal()
    try:
        projections = MaturitySettlementService(db).upcoming_maturities(days)
    except ValidationError as e:
        logger.error("Invalid lookahead: %s", e)
        return 2
    finally:
        db.close()

    logger.info("%d investments maturing soon", len(projections))
    for item in projections:
        logger.info(
            "  %s: %s + %s on %s (%d days)",
            item.id, item.principal, item.projected_interest,
            item.maturity_date, item.days_remaining,
        )
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Term deposit scheduled jobs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sweep = subparsers.add_parser("sweep", help="Settle matured investments")
    sweep.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Settlement date (YYYY-MM-DD, default: today)",
    )

    upcoming = subparsers.add_parser(
        "upcoming", help="List investments maturing soon"
    )
    upcoming.add_argument(
        "--days",
        type=int,
        default=None,
        help="Lookahead window in days",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    args = parse_args(argv)

    if args.command == "sweep":
        return run_sweep(args.as_of)
    return list_upcoming(args.days)


if __name__ == "__main__":
    sys.exit(main())
