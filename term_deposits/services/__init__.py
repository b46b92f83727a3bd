"""Business logic services."""

from term_deposits.services.account_gateway import AccountGateway
from term_deposits.services.transaction_ledger import TransactionLedger
from term_deposits.services.rate_resolver import RateResolver
from term_deposits.services.calculator import InvestmentCalculator
from term_deposits.services.schedule_generator import ScheduleGenerator
from term_deposits.services.investment_service import InvestmentService
from term_deposits.services.maturity_service import MaturitySettlementService

__all__ = [
    "AccountGateway",
    "TransactionLedger",
    "RateResolver",
    "InvestmentCalculator",
    "ScheduleGenerator",
    "InvestmentService",
    "MaturitySettlementService",
]
