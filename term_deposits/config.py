"""
Application and product configuration.

Runtime settings are loaded from environment variables.
Product configuration (rate tiers, principal and term bounds)
is a read-only object that services receive at construction
time, so alternate tables can be injected in tests.
"""

import os
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Term Deposit Engine"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/term_deposits"
    )

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "standard")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


# --- Product configuration ---

class RateTier(BaseModel):
    """
    One row of the rate table.

    The principal range is closed-open: [principal_min, principal_max).
    A principal_max of None means the band has no upper bound.
    The term range is closed: [term_min, term_max].
    """
    principal_min: Decimal
    principal_max: Decimal | None
    term_min: int
    term_max: int
    rate: Decimal

    model_config = {"frozen": True}

    def matches(self, principal: Decimal, term_days: int) -> bool:
        if not (self.term_min <= term_days <= self.term_max):
            return False
        if principal < self.principal_min:
            return False
        return self.principal_max is None or principal < self.principal_max

    def overlaps(self, other: "RateTier") -> bool:
        terms_overlap = (
            self.term_min <= other.term_max and other.term_min <= self.term_max
        )
        self_max = self.principal_max
        other_max = other.principal_max
        principals_overlap = (
            (other_max is None or self.principal_min < other_max)
            and (self_max is None or other.principal_min < self_max)
        )
        return terms_overlap and principals_overlap


TERM_BANDS = [
    (31, 60),
    (61, 90),
    (91, 120),
    (121, 180),
    (181, 240),
    (241, 300),
    (301, 360),
    (361, 1800),
]

PRINCIPAL_BANDS = [
    (Decimal("500"), Decimal("5000")),
    (Decimal("5000"), Decimal("10000")),
    (Decimal("10000"), Decimal("50000")),
    (Decimal("50000"), Decimal("100000")),
    (Decimal("100000"), None),
]

# Rates per term band, one column per principal band
STANDARD_RATES = [
    ["2.65", "2.85", "2.90", "4.70", "4.75"],
    ["2.85", "3.05", "3.15", "4.85", "4.90"],
    ["3.05", "3.25", "3.55", "5.00", "5.05"],
    ["4.75", "4.80", "5.10", "5.15", "5.20"],
    ["4.80", "4.85", "5.15", "5.20", "5.25"],
    ["4.85", "4.90", "5.20", "5.30", "5.35"],
    ["4.90", "5.00", "5.30", "5.40", "5.45"],
    ["4.95", "5.10", "5.35", "5.45", "5.50"],
]


def build_standard_tiers() -> list[RateTier]:
    """Expand the standard rate grid into a flat, sorted tier list."""
    tiers = []
    for (term_min, term_max), rates in zip(TERM_BANDS, STANDARD_RATES):
        for (principal_min, principal_max), rate in zip(PRINCIPAL_BANDS, rates):
            tiers.append(RateTier(
                principal_min=principal_min,
                principal_max=principal_max,
                term_min=term_min,
                term_max=term_max,
                rate=Decimal(rate),
            ))
    return tiers


class ProductConfig(BaseModel):
    """Read-only configuration of the term deposit product."""
    tiers: list[RateTier] = Field(default_factory=build_standard_tiers)
    default_rate: Decimal = Decimal("2.50")
    min_principal: Decimal = Decimal("500")
    max_principal: Decimal = Decimal("5000000")
    min_term_days: int = 31
    max_term_days: int = 1800
    recommendation_terms: list[int] = Field(
        default_factory=lambda: [61, 91, 121]
    )
    default_auto_renew: bool = False
    default_lookahead_days: int = 7

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def tiers_must_be_disjoint(self) -> "ProductConfig":
        for i, tier in enumerate(self.tiers):
            for other in self.tiers[i + 1:]:
                if tier.overlaps(other):
                    raise ValueError(
                        f"Rate tiers overlap: {tier!r} and {other!r}"
                    )
        return self

    @model_validator(mode="after")
    def bounds_must_be_ordered(self) -> "ProductConfig":
        if self.min_principal > self.max_principal:
            raise ValueError("min_principal must not exceed max_principal")
        if self.min_term_days > self.max_term_days:
            raise ValueError("min_term_days must not exceed max_term_days")
        return self


@lru_cache()
def get_product_config() -> ProductConfig:
    """
    Return the cached default product configuration.

    Bounds can be overridden through environment variables;
    the rate table always comes from the standard grid.
    """
    return ProductConfig(
        min_principal=Decimal(os.getenv("INVESTMENT_MIN_PRINCIPAL", "500")),
        max_principal=Decimal(os.getenv("INVESTMENT_MAX_PRINCIPAL", "5000000")),
        min_term_days=int(os.getenv("INVESTMENT_MIN_TERM_DAYS", "31")),
        max_term_days=int(os.getenv("INVESTMENT_MAX_TERM_DAYS", "1800")),
    )
