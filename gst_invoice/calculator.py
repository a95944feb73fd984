"""
Invoice totals and GST apportionment.

Rules:
1. base amount = unit price x quantity
2. taxable amount = base amount - discount, floored at zero
3. IGST (interstate) replaces CGST + SGST whenever its rate is positive
4. grand total is rounded half-up to whole rupees; the difference is the round-off

Everything here is pure: inputs are validated, never mutated, and new priced
records are returned. Nothing is logged; errors propagate to the caller.
"""
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Union
from pydantic import ValidationError

from .errors import EmptyInvoice, InvalidLineItem
from .models import ZERO, InvoiceTotals, LineItem, PricedInvoice, PricedLineItem

HUNDRED = Decimal("100")

ItemLike = Union[LineItem, Mapping[str, Any]]


def round_half_up(value: Decimal, places: int = 0) -> Decimal:
    """
    Round to `places` decimals with halves going away from zero.

    Python's round() and Decimal's default context round halves to even, so
    117.5 would become 118 but 116.5 would become 116.
    """
    exponent = Decimal(1).scaleb(-places)
    return Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def coerce_line_item(item: ItemLike, index: int | None = None) -> LineItem:
    """Accept a LineItem or a raw payload dict and return a LineItem."""
    if isinstance(item, LineItem):
        return item
    try:
        return LineItem.model_validate(item)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ())) or None
        raise InvalidLineItem(
            f"{loc or 'payload'}: {first.get('msg', 'invalid value')}",
            index=index,
            field=loc,
            value=first.get("input"),
        ) from e


def validate_line_item(item: LineItem, index: int | None = None) -> None:
    """Raise InvalidLineItem unless every amount and rate is in range."""
    if item.quantity < 0:
        raise InvalidLineItem(
            f"quantity must not be negative, got {item.quantity}",
            index=index, field="quantity", value=item.quantity,
        )

    for name in ("unit_price", "discount"):
        value = getattr(item, name)
        if not value.is_finite():
            raise InvalidLineItem(f"{name} must be a finite number", index=index, field=name, value=value)
        if value < 0:
            raise InvalidLineItem(
                f"{name} must not be negative, got {value}", index=index, field=name, value=value
            )

    for name in ("tax_rate_cgst", "tax_rate_sgst", "tax_rate_igst"):
        rate = getattr(item, name)
        if not rate.is_finite() or rate < 0 or rate > HUNDRED:
            raise InvalidLineItem(
                f"{name} must be between 0 and 100, got {rate}", index=index, field=name, value=rate
            )


def taxable_amount(item: LineItem) -> Decimal:
    """Base amount less the flat discount, never below zero."""
    return max(ZERO, item.base_amount - item.discount)


def compute_line_tax(item: ItemLike) -> tuple[Decimal, Decimal]:
    """Return (tax_amount, final_amount) for one line item."""
    line = coerce_line_item(item)
    validate_line_item(line)
    return _line_tax(line)


def _line_tax(line: LineItem) -> tuple[Decimal, Decimal]:
    taxable = taxable_amount(line)
    if line.tax_rate_igst > 0:
        tax = taxable * line.tax_rate_igst / HUNDRED
    else:
        tax = taxable * (line.tax_rate_cgst + line.tax_rate_sgst) / HUNDRED
    return tax, taxable + tax


def price_line_item(item: ItemLike, index: int | None = None) -> PricedLineItem:
    """Return a new record carrying tax_amount and final_amount."""
    line = coerce_line_item(item, index)
    validate_line_item(line, index)
    tax, final = _line_tax(line)
    return PricedLineItem.model_validate(
        {**line.model_dump(), "tax_amount": tax, "final_amount": final}
    )


def price_invoice(items: Iterable[ItemLike], require_items: bool = False) -> PricedInvoice:
    """
    Price every line item and aggregate the invoice totals.

    All items are validated before anything is summed, so a bad item never
    yields partial totals. An empty sequence gives all-zero totals unless
    require_items is set.
    """
    priced = [price_line_item(item, index) for index, item in enumerate(items)]
    if require_items and not priced:
        raise EmptyInvoice("invoice must contain at least one line item")

    sub_total = sum((p.base_amount for p in priced), ZERO)
    total_discount = sum((p.discount for p in priced), ZERO)
    total_tax = sum((p.tax_amount for p in priced), ZERO)
    exact_total = sum((p.final_amount for p in priced), ZERO)
    grand_total = round_half_up(exact_total)

    totals = InvoiceTotals(
        sub_total=sub_total,
        total_discount=total_discount,
        total_tax=total_tax,
        grand_total=grand_total,
        round_off=grand_total - exact_total,
    )
    return PricedInvoice(items=priced, totals=totals)


def compute_invoice_totals(items: Iterable[ItemLike]) -> InvoiceTotals:
    """Aggregate totals for an invoice; zero items give zero totals."""
    return price_invoice(items).totals
