"""
GST rate helpers and the per-invoice-type price basis.

Sales, job-card and advance invoices carry tax-exclusive unit prices. Quotations
are quoted at the GST-inclusive MRP, so their unit price is back-calculated to
a tax-exclusive rate before the calculator runs:

    rate = mrp / (1 + gst / 100)
"""
from __future__ import annotations
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from .calculator import HUNDRED, ItemLike, coerce_line_item, round_half_up, taxable_amount, validate_line_item
from .config import PRICE_BASIS_INCLUSIVE, TaxPolicyConfig
from .models import ZERO, GstSlab, LineItem, PricedLineItem

TWO = Decimal("2")

# Print order of the summary rows
SLAB_ORDER = {"CGST": 0, "SGST": 1, "IGST": 2}


def effective_gst_rate(item: LineItem) -> Decimal:
    """IGST when it applies, otherwise CGST + SGST."""
    if item.tax_rate_igst > 0:
        return item.tax_rate_igst
    return item.tax_rate_cgst + item.tax_rate_sgst


def split_gst_rate(rate: Decimal, interstate: bool = False) -> tuple[Decimal, Decimal, Decimal]:
    """
    Split a total GST rate into (cgst, sgst, igst).

    Interstate supplies attract IGST at the full rate; intrastate supplies
    split it equally between the centre and the state.
    """
    rate = Decimal(rate)
    if interstate:
        return ZERO, ZERO, rate
    half = rate / TWO
    return half, half, ZERO


def tax_exclusive_price(mrp: Decimal, gst_rate: Decimal, places: int = 2) -> Decimal:
    """Back-calculate the pre-tax unit rate from a GST-inclusive MRP."""
    mrp = Decimal(mrp)
    if not gst_rate:
        return mrp
    return round_half_up(mrp * HUNDRED / (HUNDRED + Decimal(gst_rate)), places)


def to_tax_exclusive(item: LineItem, places: int = 2) -> LineItem:
    """Return a copy of an MRP-priced item with its unit price made tax-exclusive."""
    rate = effective_gst_rate(item)
    return item.model_copy(update={"unit_price": tax_exclusive_price(item.unit_price, rate, places)})


def prepare_line_items(
    items: Iterable[ItemLike],
    invoice_type: str,
    policy: Optional[TaxPolicyConfig] = None,
) -> list[LineItem]:
    """
    Coerce and validate raw items, then apply the invoice type's price basis.

    Validation happens before back-calculation so an out-of-range rate is
    reported against the value the caller sent.
    """
    policy = policy or TaxPolicyConfig.from_env()
    inclusive = policy.price_basis(invoice_type) == PRICE_BASIS_INCLUSIVE

    prepared = []
    for index, item in enumerate(items):
        line = coerce_line_item(item, index)
        validate_line_item(line, index)
        if inclusive:
            line = to_tax_exclusive(line, policy.price_precision)
        prepared.append(line)
    return prepared


def summarize_gst(items: Iterable[PricedLineItem]) -> list[GstSlab]:
    """Group tax by component and rate, as printed under the item table."""
    taxable: dict[tuple[str, Decimal], Decimal] = defaultdict(lambda: ZERO)
    tax: dict[tuple[str, Decimal], Decimal] = defaultdict(lambda: ZERO)

    for item in items:
        base = taxable_amount(item)
        if item.tax_rate_igst > 0:
            components = [("IGST", item.tax_rate_igst)]
        else:
            components = [("CGST", item.tax_rate_cgst), ("SGST", item.tax_rate_sgst)]

        for kind, rate in components:
            if rate <= 0:
                continue
            # equal decimals hash equal, so 9 and 9.00 share a slab
            key = (kind, rate)
            taxable[key] += base
            tax[key] += base * rate / HUNDRED

    return [
        GstSlab(kind=kind, rate=rate, taxable_amount=taxable[(kind, rate)], tax_amount=tax[(kind, rate)])
        for kind, rate in sorted(taxable, key=lambda k: (SLAB_ORDER[k[0]], k[1]))
    ]
