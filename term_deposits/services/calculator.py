"""
Investment calculator: interest and date arithmetic.

All functions are pure. Interest uses the 360-day commercial
year: interest = principal * rate% * days / 36000.
"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from term_deposits.config import ProductConfig, get_product_config
from term_deposits.schemas.simulation import (
    ProductLimits,
    Recommendation,
    Simulation,
)
from term_deposits.services.rate_resolver import RateResolver
from term_deposits.services.validators import (
    validate_investment_terms,
    validate_principal,
)


DAYS_IN_YEAR = Decimal("360")
CENT = Decimal("0.01")


def simple_interest(
    principal: Decimal, rate_percent: Decimal, term_days: int
) -> Decimal:
    """
    Simple interest on a 360-day year.

    A single division keeps simple_interest(P, r, 360) == P * r / 100
    exact in decimal arithmetic.
    """
    principal = Decimal(principal)
    rate_percent = Decimal(rate_percent)
    return principal * rate_percent * term_days / (100 * DAYS_IN_YEAR)


def maturity_date(opening_date: date, term_days: int) -> date:
    """Calendar-day arithmetic, no banking-day adjustment."""
    return opening_date + timedelta(days=term_days)


def normalize_rate(stored_rate: Decimal) -> Decimal:
    """
    Turn a stored rate into a decimal fraction.

    Values above 1 are read as percentages (2.65 -> 0.0265); values
    of 1 or less are taken as already fractional. A 0.5% rate stored
    as 0.5 is therefore read as 50%: kept as-is until the storage
    format is pinned down.
    """
    stored_rate = Decimal(stored_rate)
    if stored_rate > 1:
        return stored_rate / 100
    return stored_rate


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class InvestmentCalculator:
    """Previews built from the rate resolver and the pure functions above."""

    def __init__(
        self,
        config: ProductConfig | None = None,
        rate_resolver: RateResolver | None = None,
    ):
        self.config = config or get_product_config()
        self.rate_resolver = rate_resolver or RateResolver(self.config)

    def simulate(
        self,
        principal: Decimal,
        term_days: int,
        today: date | None = None,
    ) -> Simulation:
        """
        Preview an investment opened today. No persistence.

        Interest and final amount are rounded to cents for display.
        """
        validate_investment_terms(self.config, principal, term_days)
        return self._project(principal, term_days, today or date.today())

    def recommendations(
        self, principal: Decimal, today: date | None = None
    ) -> list[Recommendation]:
        """Same principal over each reference term, in configured order."""
        validate_principal(self.config, principal)
        opening = today or date.today()

        recommendations = []
        for term_days in self.config.recommendation_terms:
            projection = self._project(principal, term_days, opening)
            recommendations.append(Recommendation(
                term_days=term_days,
                rate=projection.rate,
                interest=projection.interest,
                final_amount=projection.final_amount,
            ))
        return recommendations

    def limits(self) -> ProductLimits:
        return ProductLimits(
            min_principal=self.config.min_principal,
            max_principal=self.config.max_principal,
            min_term_days=self.config.min_term_days,
            max_term_days=self.config.max_term_days,
        )

    def _project(
        self, principal: Decimal, term_days: int, opening: date
    ) -> Simulation:
        rate = self.rate_resolver.rate_for(principal, term_days)
        interest = to_cents(simple_interest(principal, rate, term_days))
        return Simulation(
            principal=principal,
            term_days=term_days,
            rate=rate,
            interest=interest,
            final_amount=to_cents(principal + interest),
            opening_date=opening,
            maturity_date=maturity_date(opening, term_days),
        )
