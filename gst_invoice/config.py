"""
Tax policy configuration for the invoice calculator.

Loads settings from environment variables with sensible defaults. The policy is
passed explicitly to whoever prepares line items; nothing in the calculator
reads it from a global.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import FrozenSet
from dotenv import load_dotenv

load_dotenv()

INVOICE_TYPES = ("job-card", "sales", "advance", "quotation")

PRICE_BASIS_EXCLUSIVE = "exclusive"
PRICE_BASIS_INCLUSIVE = "inclusive"


def _parse_default_rate() -> Decimal:
    """Parse GST_DEFAULT_RATE; an unparseable value is caught by validate()."""
    env_val = os.getenv("GST_DEFAULT_RATE", "18").strip()
    try:
        return Decimal(env_val)
    except InvalidOperation:
        return Decimal("NaN")


def _parse_inclusive_types() -> FrozenSet[str]:
    """Parse GST_INCLUSIVE_TYPES, a comma separated list of invoice types."""
    env_val = os.getenv("GST_INCLUSIVE_TYPES", "quotation")
    return frozenset(t.strip().lower() for t in env_val.split(",") if t.strip())


@dataclass(frozen=True)
class TaxPolicyConfig:
    """Tax policy shared by every invoice computed in one process."""

    # Rate applied to catalog products that carry no GST columns at all
    default_gst_rate: Decimal = field(default_factory=_parse_default_rate)

    # Invoice types whose unit prices are GST-inclusive MRPs
    # Example: GST_INCLUSIVE_TYPES=quotation,advance
    inclusive_types: FrozenSet[str] = field(default_factory=_parse_inclusive_types)

    # Decimal places kept when back-calculating a tax-exclusive price
    price_precision: int = field(
        default_factory=lambda: int(os.getenv("GST_PRICE_PRECISION", "2"))
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @classmethod
    def from_env(cls) -> "TaxPolicyConfig":
        """Create config from environment variables."""
        return cls()

    def price_basis(self, invoice_type: str) -> str:
        """Return whether unit prices of this invoice type include GST."""
        if invoice_type in self.inclusive_types:
            return PRICE_BASIS_INCLUSIVE
        return PRICE_BASIS_EXCLUSIVE

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []
        rate = self.default_gst_rate
        if not rate.is_finite() or rate < 0 or rate > 100:
            errors.append("GST_DEFAULT_RATE must be a number between 0 and 100")
        unknown = sorted(self.inclusive_types - set(INVOICE_TYPES))
        if unknown:
            errors.append(f"GST_INCLUSIVE_TYPES has unknown invoice types: {', '.join(unknown)}")
        if self.price_precision < 0:
            errors.append("GST_PRICE_PRECISION must not be negative")
        return errors
