"""
Compute invoice totals from a JSON payload.

Usage:
    # Totals for a sales invoice
    gst-invoice invoice.json

    # Quotation read from stdin, printed as a text summary
    cat quote.json | gst-invoice - --type quotation --format text

    # Assign the next number in the series after SI-0041
    gst-invoice invoice.json --next-number SI-0041

The payload is either a list of line items or an object:
    {"invoiceType": "sales", "items": [...], "amountPaid": 500, "amountType": "cash"}
"""
from __future__ import annotations
import argparse
import json
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
from jinja2 import Template
from loguru import logger

from . import __version__
from .calculator import round_half_up
from .config import INVOICE_TYPES, TaxPolicyConfig
from .errors import BillingError
from .invoice import build_invoice
from .models import InvoiceDocument
from .numbering import next_invoice_number

TEMPLATES_DIR = Path(__file__).parent / "templates"

TITLES = {
    "job-card": "JOB CARD INVOICE",
    "sales": "TAX INVOICE",
    "advance": "ADVANCE RECEIPT",
    "quotation": "QUOTATION",
}


def load_payload(path: str) -> dict[str, Any]:
    """Read the payload; JSON numbers become Decimal so no binary float creeps in."""
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    payload = json.loads(text, parse_float=Decimal)
    if isinstance(payload, list):
        payload = {"items": payload}
    if not isinstance(payload, dict):
        raise BillingError("Payload must be a JSON object or a list of line items")
    return payload


def _money(value: Decimal) -> str:
    return f"{round_half_up(value, 2):.2f}"


def render_text(doc: InvoiceDocument) -> str:
    template = Template(
        (TEMPLATES_DIR / "summary.txt.j2").read_text(encoding="utf-8"),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    return template.render(doc=doc, title=TITLES[doc.invoice_type], money=_money)


def configure_logging(config: TaxPolicyConfig, verbose: bool = False, quiet: bool = False) -> None:
    logger.remove()
    if quiet:
        logger.add(sys.stderr, level="ERROR")
    elif verbose:
        logger.add(sys.stderr, level="DEBUG")
    else:
        logger.add(sys.stderr, level=config.log_level.upper())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gst-invoice",
        description="Compute GST invoice totals",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("payload", help="JSON payload file, or - for stdin")
    parser.add_argument(
        "--type",
        choices=INVOICE_TYPES,
        help="Invoice type (default: payload invoiceType, else sales)",
    )
    parser.add_argument(
        "--next-number",
        nargs="?",
        const="",
        metavar="LAST",
        help="Assign the number after LAST in the type's series (no value: first number)",
    )
    parser.add_argument(
        "--allow-empty",
        action="store_true",
        help="Return zero totals instead of failing when there are no items",
    )
    parser.add_argument(
        "--format",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Logging
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output except errors",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = TaxPolicyConfig.from_env()
    configure_logging(config, verbose=args.verbose, quiet=args.quiet)

    errors = config.validate()
    if errors:
        for err in errors:
            logger.error(f"Configuration error: {err}")
        return 1

    try:
        payload = load_payload(args.payload)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"Could not read payload {args.payload}: {e}")
        return 1
    except BillingError as e:
        logger.error(str(e))
        return 1

    invoice_type = args.type or payload.get("invoiceType") or "sales"
    if not isinstance(invoice_type, str) or invoice_type not in INVOICE_TYPES:
        logger.error(f"Invoice rejected: invalid invoice type {invoice_type!r} (valid: {', '.join(INVOICE_TYPES)})")
        return 1
    logger.debug(f"Computing {invoice_type} totals, price basis {config.price_basis(invoice_type)}")

    try:
        invoice_number = payload.get("invoiceNumber")
        if args.next_number is not None and invoice_type != "quotation":
            invoice_number = next_invoice_number(invoice_type, args.next_number or None)

        doc = build_invoice(
            payload.get("items") or [],
            invoice_type=invoice_type,
            policy=config,
            amount_paid=payload.get("amountPaid", 0),
            amount_type=payload.get("amountType", "cash"),
            invoice_number=invoice_number,
            require_items=False if args.allow_empty else None,
        )
    except BillingError as e:
        logger.error(f"Invoice rejected: {e}")
        return 1

    logger.info(
        f"{invoice_type}: {len(doc.items)} items, grand total {doc.totals.grand_total} "
        f"(round off {doc.totals.round_off})"
    )

    if args.format == "text":
        print(render_text(doc))
    else:
        print(json.dumps(doc.snapshot(), indent=2, ensure_ascii=False))
    return 0
