"""
Tests for line tax and invoice totals.
"""
from decimal import Decimal
import pytest
from gst_invoice.calculator import (
    compute_invoice_totals,
    compute_line_tax,
    price_invoice,
    price_line_item,
    round_half_up,
    taxable_amount,
)
from gst_invoice.errors import EmptyInvoice, InvalidLineItem
from gst_invoice.models import LineItem


def item(qty, price, discount=0, cgst=0, sgst=0, igst=0):
    return LineItem(
        quantity=qty,
        unit_price=Decimal(str(price)),
        discount=Decimal(str(discount)),
        tax_rate_cgst=Decimal(str(cgst)),
        tax_rate_sgst=Decimal(str(sgst)),
        tax_rate_igst=Decimal(str(igst)),
    )


INTRASTATE = item(2, 250, cgst=9, sgst=9)
INTERSTATE = item(1, 1000, igst=18)


class TestRoundHalfUp:
    """Tests for the explicit rounding helper."""

    def test_half_rounds_up_not_to_even(self):
        """116.5 goes to 117 where banker's rounding would give 116."""
        assert round_half_up(Decimal("116.5")) == Decimal("117")
        assert round_half_up(Decimal("117.5")) == Decimal("118")

    def test_below_half_rounds_down(self):
        assert round_half_up(Decimal("117.4999")) == Decimal("117")

    def test_places(self):
        """Test rounding to paise."""
        assert round_half_up(Decimal("2.675"), 2) == Decimal("2.68")
        assert round_half_up(Decimal("2.674"), 2) == Decimal("2.67")


class TestComputeLineTax:
    """Tests for per-line GST."""

    def test_intrastate_cgst_sgst(self):
        """2 x 250 at 9% + 9%."""
        assert taxable_amount(INTRASTATE) == Decimal("500")
        assert compute_line_tax(INTRASTATE) == (Decimal("90"), Decimal("590"))

    def test_interstate_igst(self):
        """1 x 1000 at 18% IGST."""
        assert compute_line_tax(INTERSTATE) == (Decimal("180"), Decimal("1180"))

    def test_discount_reduces_taxable_amount(self):
        """3 x 100 less 50 at 18%."""
        line = item(3, 100, discount=50, cgst=9, sgst=9)
        assert taxable_amount(line) == Decimal("250")
        assert compute_line_tax(line) == (Decimal("45"), Decimal("295"))

    def test_igst_excludes_cgst_and_sgst(self):
        """Stored CGST/SGST rates are ignored when IGST applies."""
        line = item(1, 1000, cgst=9, sgst=9, igst=18)
        assert compute_line_tax(line) == (Decimal("180"), Decimal("1180"))

    def test_discount_larger_than_base_floors_at_zero(self):
        line = item(1, 100, discount=150, cgst=9, sgst=9)
        assert taxable_amount(line) == Decimal("0")
        assert compute_line_tax(line) == (Decimal("0"), Decimal("0"))

    def test_zero_quantity_or_price(self):
        assert compute_line_tax(item(0, 100, cgst=9, sgst=9)) == (0, 0)
        assert compute_line_tax(item(5, 0, igst=28)) == (0, 0)

    def test_accepts_raw_payload_with_catalog_field_names(self):
        """revisedMRP / CGSTCode spellings from the catalog are accepted."""
        payload = {"quantity": 2, "revisedMRP": "250", "CGSTCode": 9, "SGSTCode": 9, "IGSTCode": 0}
        assert compute_line_tax(payload) == (Decimal("90"), Decimal("590"))

    def test_accepts_mrp_spelling(self):
        payload = {"quantity": 1, "MRP": "1000", "taxRateIGST": "18"}
        assert compute_line_tax(payload) == (Decimal("180"), Decimal("1180"))


class TestValidation:
    """Tests for rejected line items."""

    def test_negative_quantity(self):
        with pytest.raises(InvalidLineItem) as exc:
            compute_line_tax(item(-1, 100))
        assert exc.value.field == "quantity"

    def test_negative_unit_price(self):
        with pytest.raises(InvalidLineItem) as exc:
            compute_line_tax(item(1, -5))
        assert exc.value.field == "unit_price"

    def test_negative_discount(self):
        with pytest.raises(InvalidLineItem) as exc:
            compute_line_tax(item(1, 100, discount=-1))
        assert exc.value.field == "discount"

    @pytest.mark.parametrize("rates", [{"cgst": 101}, {"sgst": -1}, {"igst": "100.01"}])
    def test_rate_out_of_range(self, rates):
        with pytest.raises(InvalidLineItem):
            compute_line_tax(item(1, 100, **rates))

    def test_rate_of_exactly_100_is_allowed(self):
        assert compute_line_tax(item(1, 100, igst=100)) == (Decimal("100"), Decimal("200"))

    def test_non_numeric_price_in_payload(self):
        with pytest.raises(InvalidLineItem):
            compute_line_tax({"quantity": 1, "unitPrice": "abc"})

    def test_missing_price_in_payload(self):
        with pytest.raises(InvalidLineItem):
            compute_line_tax({"quantity": 1})

    def test_non_finite_price(self):
        with pytest.raises(InvalidLineItem):
            compute_line_tax({"quantity": 1, "unitPrice": "NaN"})

    def test_error_reports_item_index(self):
        """The second item is bad; nothing is totalled."""
        with pytest.raises(InvalidLineItem) as exc:
            compute_invoice_totals([INTRASTATE, item(-2, 10)])
        assert exc.value.index == 1
        assert "item 1" in str(exc.value)


class TestComputeInvoiceTotals:
    """Tests for invoice-level aggregation."""

    def test_empty_invoice_is_all_zero(self):
        totals = compute_invoice_totals([])
        assert totals.sub_total == 0
        assert totals.total_discount == 0
        assert totals.total_tax == 0
        assert totals.grand_total == 0
        assert totals.round_off == 0

    def test_empty_invoice_rejected_when_items_required(self):
        with pytest.raises(EmptyInvoice):
            price_invoice([], require_items=True)

    def test_mixed_intrastate_and_interstate(self):
        totals = compute_invoice_totals([INTRASTATE, INTERSTATE])
        assert totals.sub_total == Decimal("1500")
        assert totals.total_discount == Decimal("0")
        assert totals.total_tax == Decimal("270")
        assert totals.grand_total == Decimal("1770")
        assert totals.round_off == Decimal("0")

    def test_fractional_total_is_rounded(self):
        """99.99 at 18% = 117.9882, rounded to 118."""
        totals = compute_invoice_totals([item(1, "99.99", cgst=9, sgst=9)])
        assert totals.grand_total == Decimal("118")
        assert totals.round_off == Decimal("0.0118")

    def test_subtotal_is_pre_discount(self):
        totals = compute_invoice_totals([item(3, 100, discount=50, cgst=9, sgst=9)])
        assert totals.sub_total == Decimal("300")
        assert totals.total_discount == Decimal("50")
        assert totals.grand_total == Decimal("295")

    def test_total_tax_is_sum_of_line_tax(self):
        priced = price_invoice([
            item(3, "33.33", cgst=6, sgst=6),
            item(7, "12.10", discount="1.5", igst=28),
            item(1, "0.99", cgst="2.5", sgst="2.5"),
        ])
        assert priced.totals.total_tax == sum(p.tax_amount for p in priced.items)
        assert priced.totals.grand_total == round_half_up(sum(p.final_amount for p in priced.items))

    @pytest.mark.parametrize("price", ["0.5", "100.49", "100.5", "99.01", "12345.678"])
    def test_round_off_is_within_half_a_rupee(self, price):
        """Half-up rounding: a round-off of +0.5 is possible, -0.5 is not."""
        totals = compute_invoice_totals([item(1, price)])
        assert Decimal("-0.5") < totals.round_off <= Decimal("0.5")
        assert totals.grand_total - totals.round_off == Decimal(price)

    def test_exact_half_rounds_up(self):
        totals = compute_invoice_totals([item(1, "100.5")])
        assert totals.grand_total == Decimal("101")
        assert totals.round_off == Decimal("0.5")

    def test_outputs_are_non_negative(self):
        totals = compute_invoice_totals([
            item(1, 10, discount=500, cgst=14, sgst=14),
            item(0, 999, igst=18),
            item(4, "0.01", cgst=9, sgst=9),
        ])
        for value in (totals.sub_total, totals.total_discount, totals.total_tax, totals.grand_total):
            assert value >= 0

    def test_order_does_not_change_totals(self):
        lines = [INTRASTATE, INTERSTATE, item(3, 100, discount=50, cgst=9, sgst=9)]
        assert compute_invoice_totals(lines) == compute_invoice_totals(list(reversed(lines)))

    def test_idempotent(self):
        lines = [INTRASTATE, item(1, "99.99", cgst=9, sgst=9)]
        first = price_invoice(lines)
        second = price_invoice(lines)
        assert first == second
        assert str(first.totals.round_off) == str(second.totals.round_off)


class TestNoAliasing:
    """Priced items are new records; caller data is left alone."""

    def test_payload_dict_is_not_mutated(self):
        payload = {"quantity": 2, "unitPrice": "250", "taxRateCGST": 9, "taxRateSGST": 9}
        snapshot = dict(payload)
        priced = price_invoice([payload])
        assert payload == snapshot
        assert "taxAmount" not in payload
        assert priced.items[0].tax_amount == Decimal("90")

    def test_line_item_is_copied(self):
        priced = price_line_item(INTRASTATE)
        assert priced is not INTRASTATE
        assert priced.final_amount == Decimal("590")
        assert priced.unit_price == INTRASTATE.unit_price
        assert not hasattr(INTRASTATE, "tax_amount")

    def test_stored_tax_amount_is_recomputed(self):
        """A resaved invoice carries stale amounts; they are ignored."""
        payload = {"quantity": 1, "unitPrice": "1000", "taxRateIGST": 18, "taxAmount": 1, "finalAmount": 2}
        priced = price_line_item(payload)
        assert priced.tax_amount == Decimal("180")
        assert priced.final_amount == Decimal("1180")
