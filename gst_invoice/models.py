from __future__ import annotations
from decimal import Decimal
from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ZERO = Decimal("0")


def _in(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class LineItem(BaseModel):
    """One product on an invoice, as sent by the billing screens or the importer."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    part_no: Optional[str] = Field(
        default=None, validation_alias=_in("partNo", "part_no"), serialization_alias="partNo"
    )
    part_name: Optional[str] = Field(
        default=None,
        validation_alias=_in("partName", "part_name", "description"),
        serialization_alias="partName",
    )
    hsn_code: Optional[str] = Field(
        default=None, validation_alias=_in("hsnCode", "hsn_code", "hsn"), serialization_alias="hsnCode"
    )
    quantity: int = 1
    # price per unit; revisedMRP comes from the catalog import, MRP from quotations
    unit_price: Decimal = Field(
        validation_alias=_in("unitPrice", "unit_price", "revisedMRP", "MRP", "mrp"),
        serialization_alias="unitPrice",
    )
    discount: Decimal = ZERO
    tax_rate_cgst: Decimal = Field(
        default=ZERO,
        validation_alias=_in("taxRateCGST", "tax_rate_cgst", "CGSTCode", "cgst"),
        serialization_alias="taxRateCGST",
    )
    tax_rate_sgst: Decimal = Field(
        default=ZERO,
        validation_alias=_in("taxRateSGST", "tax_rate_sgst", "SGSTCode", "sgst"),
        serialization_alias="taxRateSGST",
    )
    tax_rate_igst: Decimal = Field(
        default=ZERO,
        validation_alias=_in("taxRateIGST", "tax_rate_igst", "IGSTCode", "igst"),
        serialization_alias="taxRateIGST",
    )

    @property
    def base_amount(self) -> Decimal:
        return self.unit_price * self.quantity


class PricedLineItem(LineItem):
    tax_amount: Decimal = Field(
        validation_alias=_in("taxAmount", "tax_amount"), serialization_alias="taxAmount"
    )
    final_amount: Decimal = Field(
        validation_alias=_in("finalAmount", "final_amount"), serialization_alias="finalAmount"
    )


class InvoiceTotals(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sub_total: Decimal = Field(default=ZERO, alias="subTotal")
    total_discount: Decimal = Field(default=ZERO, alias="totalDiscount")
    total_tax: Decimal = Field(default=ZERO, alias="totalTax")
    grand_total: Decimal = Field(default=ZERO, alias="grandTotal")
    round_off: Decimal = Field(default=ZERO, alias="roundOff")


class PricedInvoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: list[PricedLineItem] = Field(default_factory=list)
    totals: InvoiceTotals = Field(default_factory=InvoiceTotals)


class GstSlab(BaseModel):
    """One row of the GST summary printed under the item table."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: str                    # CGST, SGST or IGST
    rate: Decimal
    taxable_amount: Decimal = Field(alias="taxableAmount")
    tax_amount: Decimal = Field(alias="taxAmount")


class Settlement(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    amount_type: str = Field(default="cash", alias="amountType")
    amount_paid: Decimal = Field(default=ZERO, alias="amountPaid")
    balance_due: Decimal = Field(default=ZERO, alias="balanceDue")
    status: str = "unpaid"


class InvoiceDocument(BaseModel):
    """Everything a caller stores next to the invoice, computed in one pass."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    invoice_type: str = Field(alias="invoiceType")
    invoice_number: Optional[str] = Field(default=None, alias="invoiceNumber")
    items: list[PricedLineItem] = Field(default_factory=list)
    totals: InvoiceTotals = Field(default_factory=InvoiceTotals)
    gst_summary: list[GstSlab] = Field(default_factory=list, alias="gstSummary")
    settlement: Settlement = Field(default_factory=Settlement)
    amount_in_words: str = Field(default="", alias="amountInWords")

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys and decimals as strings."""
        return self.model_dump(by_alias=True, mode="json")
