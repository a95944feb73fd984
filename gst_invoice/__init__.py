"""
GST invoice totals for a small-business billing backend.

Given the line items of an invoice or quotation, computes per-item GST and
final amounts and the invoice totals (subtotal, discount, tax, rounded grand
total, round-off), plus the GST slab summary, settlement and amount in words
that are stored with the invoice.

Usage:
    from gst_invoice import build_invoice, compute_invoice_totals

    totals = compute_invoice_totals([
        {"quantity": 2, "revisedMRP": "250", "CGSTCode": 9, "SGSTCode": 9},
    ])

    # From the shell
    python -m gst_invoice invoice.json --format text
"""

__version__ = "1.0.0"

from .calculator import compute_invoice_totals, compute_line_tax, price_invoice, round_half_up
from .config import TaxPolicyConfig
from .errors import (
    BillingError,
    EmptyInvoice,
    InvalidDocumentNumber,
    InvalidLineItem,
    InvalidPayment,
    UnknownInvoiceType,
)
from .invoice import build_invoice, settle
from .models import InvoiceDocument, InvoiceTotals, LineItem, PricedLineItem

__all__ = [
    "BillingError",
    "EmptyInvoice",
    "InvalidDocumentNumber",
    "InvalidLineItem",
    "InvalidPayment",
    "InvoiceDocument",
    "InvoiceTotals",
    "LineItem",
    "PricedLineItem",
    "TaxPolicyConfig",
    "UnknownInvoiceType",
    "build_invoice",
    "compute_invoice_totals",
    "compute_line_tax",
    "price_invoice",
    "round_half_up",
    "settle",
    "__version__",
]
