from __future__ import annotations
import random
import re
from typing import Optional

from .errors import InvalidDocumentNumber, UnknownInvoiceType

INVOICE_PREFIXES = {
    "job-card": "JC",
    "sales": "SI",
    "advance": "AD",
}

_NUMBER_RE = re.compile(r"^(?P<prefix>[A-Z]+)-(?P<seq>\d+)$")


def next_invoice_number(invoice_type: str, last_number: Optional[str] = None) -> str:
    """
    Next number in an invoice type's series: SI-0001, SI-0002, ...

    `last_number` is the most recent number issued for the same type, or None
    for the first invoice. Sequences widen past 9999 rather than wrap.
    """
    prefix = INVOICE_PREFIXES.get(invoice_type)
    if prefix is None:
        raise UnknownInvoiceType(f"Invalid invoice type: {invoice_type!r}")

    next_seq = 1
    if last_number:
        m = _NUMBER_RE.match(last_number.strip())
        if not m:
            raise InvalidDocumentNumber(f"Cannot parse invoice number: {last_number!r}")
        if m.group("prefix") != prefix:
            raise InvalidDocumentNumber(
                f"{last_number!r} does not belong to the {invoice_type} series ({prefix})"
            )
        next_seq = int(m.group("seq")) + 1

    return f"{prefix}-{next_seq:04d}"


def quotation_number(customer_name: str, rng: Optional[random.Random] = None) -> str:
    """QT-<customer>-<six random digits>; callers retry on a collision."""
    name = (customer_name or "").strip()
    if not name:
        raise InvalidDocumentNumber("Quotation number needs a customer name")
    rng = rng or random.Random()
    return f"QT-{name}-{rng.randint(100000, 999999)}"
