"""
Compute everything stored alongside an invoice or quotation.

This is the entry point for the HTTP layer and the CLI:

    doc = build_invoice(payload["items"], invoice_type="sales", policy=policy)
    invoice.totals = doc.snapshot()["totals"]

The document is a snapshot: once saved with the invoice it is not recomputed
unless the invoice is edited and saved through this function again.
"""
from __future__ import annotations
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from .calculator import ItemLike, price_invoice
from .config import INVOICE_TYPES, TaxPolicyConfig
from .errors import InvalidPayment, UnknownInvoiceType
from .models import ZERO, InvoiceDocument, InvoiceTotals, Settlement
from .pricing import prepare_line_items, summarize_gst
from .words import amount_in_words

AMOUNT_TYPES = ("cash", "credit")

# A quotation preview may be empty; a real invoice may not
TYPES_ALLOWING_EMPTY = frozenset({"quotation"})


def settle(totals: InvoiceTotals, amount_paid: Decimal = ZERO, amount_type: str = "cash") -> Settlement:
    """Balance due after a payment; overpayment leaves a zero balance."""
    if amount_type not in AMOUNT_TYPES:
        raise InvalidPayment(f"amountType must be one of {', '.join(AMOUNT_TYPES)}, got {amount_type!r}")
    try:
        paid = Decimal(amount_paid)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidPayment(f"amountPaid is not a number: {amount_paid!r}") from e
    if not paid.is_finite() or paid < 0:
        raise InvalidPayment(f"amountPaid must not be negative, got {amount_paid}")

    balance = max(ZERO, totals.grand_total - paid)
    if balance == 0:
        status = "paid"
    elif paid > 0:
        status = "partial"
    else:
        status = "unpaid"
    return Settlement(amount_type=amount_type, amount_paid=paid, balance_due=balance, status=status)


def build_invoice(
    items: Iterable[ItemLike],
    invoice_type: str = "sales",
    policy: Optional[TaxPolicyConfig] = None,
    amount_paid: Decimal = ZERO,
    amount_type: str = "cash",
    invoice_number: Optional[str] = None,
    require_items: Optional[bool] = None,
) -> InvoiceDocument:
    """Price the items under the invoice type's rules and assemble the document."""
    if invoice_type not in INVOICE_TYPES:
        raise UnknownInvoiceType(
            f"Invalid invoice type: {invoice_type!r} (valid: {', '.join(INVOICE_TYPES)})"
        )
    if require_items is None:
        require_items = invoice_type not in TYPES_ALLOWING_EMPTY

    policy = policy or TaxPolicyConfig.from_env()
    lines = prepare_line_items(items, invoice_type, policy)
    priced = price_invoice(lines, require_items=require_items)

    return InvoiceDocument(
        invoice_type=invoice_type,
        invoice_number=invoice_number,
        items=priced.items,
        totals=priced.totals,
        gst_summary=summarize_gst(priced.items),
        settlement=settle(priced.totals, amount_paid, amount_type),
        amount_in_words=amount_in_words(priced.totals.grand_total),
    )
