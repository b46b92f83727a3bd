"""
Rate resolver: maps (principal, term) to an interest rate.

Pure lookup over the configured tier table. Used both for
previews and for the rate that gets frozen into a new
investment, so it must never touch the database.
"""

from decimal import Decimal

from term_deposits.config import ProductConfig, RateTier, get_product_config
from term_deposits.schemas.simulation import (
    RateQuote,
    RateTableBand,
    RateTableTier,
)


DEFAULT_RATE_MESSAGE = "No rate tier matches; default rate applied"


class RateResolver:

    def __init__(self, config: ProductConfig | None = None):
        self.config = config or get_product_config()

    def find_tier(self, principal: Decimal, term_days: int) -> RateTier | None:
        """Return the first tier containing both inputs, if any."""
        for tier in self.config.tiers:
            if tier.matches(principal, term_days):
                return tier
        return None

    def resolve(self, principal: Decimal, term_days: int) -> RateQuote:
        """
        Resolve the applicable rate as a percentage (2.65 means 2.65%).

        Falls back to the configured default rate, flagged as such,
        when no tier matches.
        """
        tier = self.find_tier(principal, term_days)
        if tier is None:
            return RateQuote(
                rate=self.config.default_rate,
                is_default=True,
                message=DEFAULT_RATE_MESSAGE,
            )

        return RateQuote(
            rate=tier.rate,
            principal_min=tier.principal_min,
            principal_max=tier.principal_max,
            term_min=tier.term_min,
            term_max=tier.term_max,
        )

    def rate_for(self, principal: Decimal, term_days: int) -> Decimal:
        return self.resolve(principal, term_days).rate

    def rate_table(self) -> list[RateTableBand]:
        """Group the tiers by term range for display, in table order."""
        bands: dict[tuple[int, int], RateTableBand] = {}
        for tier in self.config.tiers:
            key = (tier.term_min, tier.term_max)
            if key not in bands:
                bands[key] = RateTableBand(
                    label=_band_label(tier, self.config.max_term_days),
                    term_min=tier.term_min,
                    term_max=tier.term_max,
                    tiers=[],
                )
            bands[key].tiers.append(RateTableTier(
                principal_min=tier.principal_min,
                principal_max=tier.principal_max,
                rate=tier.rate,
            ))
        return list(bands.values())


def _band_label(tier: RateTier, max_term_days: int) -> str:
    if tier.term_max >= max_term_days:
        return f"{tier.term_min}+ days"
    return f"{tier.term_min}-{tier.term_max} days"
