"""
Catalog product rows to invoice line items.

The spreadsheet importer hands over rows keyed by whatever headers the sheet
had ("Part no ", "Revised MRP", "CGST_Code", ...). Headers are normalized and
mapped onto line item fields. Blank price or rate cells fall back to defaults;
a filled cell that is not a number rejects the product.
"""
from __future__ import annotations
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional
from loguru import logger

from .calculator import coerce_line_item
from .config import TaxPolicyConfig
from .errors import InvalidLineItem
from .models import ZERO, LineItem
from .pricing import split_gst_rate

# normalized header -> line item field
COLUMN_MAP = {
    "partno": "part_no",
    "partname": "part_name",
    "description": "part_name",
    "tariffcode": "tariff",
    "tariff": "tariff",
    "hsn": "hsn_code",
    "hsncode": "hsn_code",
    "revisedmrp": "unit_price",
    "mrp": "unit_price",
    "unitprice": "unit_price",
    "cgstcode": "tax_rate_cgst",
    "cgst": "tax_rate_cgst",
    "sgstcode": "tax_rate_sgst",
    "sgst": "tax_rate_sgst",
    "igstcode": "tax_rate_igst",
    "igst": "tax_rate_igst",
}

RATE_FIELDS = ("tax_rate_cgst", "tax_rate_sgst", "tax_rate_igst")


def normalize_key(key: Any) -> str:
    """'Part no ' -> 'partno', 'CGST_Code' -> 'cgstcode'."""
    if key is None:
        return ""
    return re.sub(r"[\s_]+", "", str(key).strip().lower())


def normalize_product(product: Mapping[str, Any]) -> dict[str, Any]:
    """Rename recognised columns to field names; unknown columns are dropped."""
    row: dict[str, Any] = {}
    for key, value in product.items():
        field_name = COLUMN_MAP.get(normalize_key(key))
        if field_name and field_name not in row:
            row[field_name] = value
    return row


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip().lower() in ("", "null", "none"))


def _to_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, float):
        parsed = Decimal(str(value))
    else:
        s = re.sub(r"[,₹$\s]", "", str(value))
        if s.lower().startswith("rs."):
            s = s[3:]
        try:
            parsed = Decimal(s)
        except InvalidOperation:
            return None
    return parsed if parsed.is_finite() else None


def parse_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Parse a spreadsheet cell to Decimal.

    Handles:
    - Comma separators (1,234.56)
    - Currency symbols (₹ 250)
    - Empty cells
    """
    if _is_blank(value):
        return default
    parsed = _to_decimal(value)
    if parsed is None:
        logger.warning(f"Could not parse number: {value!r}")
        return default
    return parsed


def _cell_decimal(row: Mapping[str, Any], name: str) -> Decimal:
    """Blank cells read as zero; anything else must be a finite number."""
    value = row.get(name)
    if _is_blank(value):
        return ZERO
    parsed = _to_decimal(value)
    if parsed is None:
        raise InvalidLineItem(
            f"product {row.get('part_no') or row.get('part_name') or '?'}: {name} is not a number: {value!r}",
            field=name,
            value=value,
        )
    return parsed


def line_item_from_product(
    product: Mapping[str, Any],
    quantity: int = 1,
    discount: Decimal = ZERO,
    policy: Optional[TaxPolicyConfig] = None,
    interstate: bool = False,
) -> LineItem:
    """
    Build a line item from one catalog product row.

    A product with none of the GST columns filled in gets the policy's default
    rate, split into CGST/SGST or charged as IGST depending on `interstate`.
    A product that states its rates, even as zero, keeps them.
    """
    row = normalize_product(product)

    if _is_blank(row.get("unit_price")):
        raise InvalidLineItem(
            f"product {row.get('part_no') or row.get('part_name') or '?'} has no price",
            field="unit_price",
        )

    rates = {name: row.get(name) for name in RATE_FIELDS}
    if all(_is_blank(v) for v in rates.values()):
        policy = policy or TaxPolicyConfig.from_env()
        cgst, sgst, igst = split_gst_rate(policy.default_gst_rate, interstate)
        logger.debug(
            f"Product {row.get('part_no')} has no GST columns, "
            f"using default rate {policy.default_gst_rate}%"
        )
    else:
        cgst, sgst, igst = (_cell_decimal(row, name) for name in RATE_FIELDS)

    payload = {
        "part_no": row.get("part_no"),
        "part_name": row.get("part_name"),
        "hsn_code": row.get("hsn_code") or row.get("tariff"),
        "quantity": quantity,
        "unit_price": _cell_decimal(row, "unit_price"),
        "discount": discount,
        "tax_rate_cgst": cgst,
        "tax_rate_sgst": sgst,
        "tax_rate_igst": igst,
    }
    return coerce_line_item(payload)
