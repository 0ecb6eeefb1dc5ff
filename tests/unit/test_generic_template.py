"""
Unit tests for the generic supplier template.

Run: pytest tests/unit/test_generic_template.py -v
"""

from decimal import Decimal
from io import BytesIO

import pytest
from openpyxl import Workbook
from PIL import Image as PILImage

from models.order_export import LogoAsset, TemplateConfig
from templates.generic import apply_generic_template, apply_generic_template_multi
from tests.factories import make_multi_export, make_parts, make_single_export


def _sheet():
    return Workbook().active


def _values(ws) -> list:
    return [[cell.value for cell in row] for row in ws.iter_rows()]


class TestGenericSingleLayout:
    """Tests for apply_generic_template()."""

    def test_column_headers(self):
        """Should lay out the nine single-order columns."""
        ws = _sheet()
        apply_generic_template(ws, make_single_export(part_count=3))

        headers = [ws.cell(row=13, column=c).value for c in range(1, 10)]
        assert headers == [
            "Item #", "Part Number", "Description", "Specifications", "Qty",
            "Unit Price (JPY)", "Total (JPY)", "Supplier Lead Time", "Notes",
        ]
        assert ws.cell(row=13, column=10).value is None

    def test_one_row_per_part(self):
        """Should write parts in order with blank prices and a line total formula."""
        ws = _sheet()
        layout = apply_generic_template(ws, make_single_export(part_count=3))

        assert layout.first_item_row == 14
        assert layout.last_item_row == 16
        assert layout.item_count == 3
        assert ws["A14"].value == 1
        assert ws["B14"].value == "PN-0001"
        assert ws["C14"].value == "Brake Pad 1"
        assert ws["E16"].value == 3
        assert ws["F14"].value is None
        assert ws["G14"].value == "=E14*F14"
        assert ws["G16"].value == "=E16*F16"

    def test_totals_follow_item_count(self):
        """Subtotal should sum exactly the item rows; grand total adds shipping."""
        ws = _sheet()
        layout = apply_generic_template(ws, make_single_export(part_count=3))

        assert layout.subtotal_cell == "G18"
        assert ws["G18"].value == "=SUM(G14:G16)"
        assert ws["G19"].value is None
        assert layout.grand_total_cell == "G20"
        assert ws["G20"].value == "=G18+G19"

    @pytest.mark.parametrize("part_count", [1, 5, 12])
    def test_subtotal_range_scales(self, part_count):
        ws = _sheet()
        layout = apply_generic_template(ws, make_single_export(part_count=part_count))

        last = 13 + part_count
        assert layout.last_item_row == last
        assert ws[layout.subtotal_cell].value == f"=SUM(G14:G{last})"

    def test_tax_line_when_configured(self):
        ws = _sheet()
        data = make_single_export(part_count=3)
        layout = apply_generic_template(ws, data, config=TemplateConfig(tax_rate=Decimal("0.08")))

        assert ws["G20"].value == "=G18*0.08"
        assert layout.grand_total_cell == "G21"
        assert ws["G21"].value == "=G18+G19+G20"

    def test_fractional_tax_rate_label_matches_formula(self):
        ws = _sheet()
        apply_generic_template(ws, make_single_export(part_count=3), config=TemplateConfig(tax_rate=Decimal("0.085")))

        assert ws["F20"].value == "Tax (8.5%):"
        assert ws["G20"].value == "=G18*0.085"

    def test_header_block(self):
        ws = _sheet()
        apply_generic_template(ws, make_single_export(part_count=1))

        assert ws["A1"].value == "LOGO"
        assert ws["A4"].value == "PURCHASE ORDER REQUEST - QUOTE"
        assert ws["A6"].value == "Order: ORD-001"
        assert ws["A7"].value == "Order Date: 07/03/2025"
        assert ws["B9"].value == "Acme Parts Co."
        assert ws["F9"].value == "Ken Sato"

    def test_terms_and_signoff(self):
        """Terms follow the totals; quote deadline is order date + 7 days."""
        ws = _sheet()
        layout = apply_generic_template(ws, make_single_export(part_count=3))

        assert ws["A22"].value == "TERMS AND CONDITIONS:"
        assert ws["A23"].value == "- Please provide complete quote by: 14/03/2025"
        assert ws["A26"].value == "- Payment terms: Net 30"
        assert ws["A30"].value == "SUPPLIER TO COMPLETE AND RETURN:"
        assert ws["A32"].value == "Quoted By:"
        assert ws["A36"].value == "Signature:"
        assert layout.last_row == 36

    def test_print_geometry(self):
        ws = _sheet()
        layout = apply_generic_template(ws, make_single_export(part_count=3))

        assert layout.freeze_cell == "A14"
        assert ws.freeze_panes == "A14"
        assert layout.print_area == "A1:I38"
        assert ws.page_setup.orientation == "landscape"
        assert ws.page_setup.fitToWidth == 1
        assert ws.page_setup.fitToHeight == 0

    def test_long_specifications_get_tall_rows(self):
        ws = _sheet()
        data = make_single_export(part_count=1)
        data.parts = make_parts(2, specifications={"material": "ceramic composite with copper-free backing plate"})
        apply_generic_template(ws, data)

        assert ws.row_dimensions[14].height == 40
        assert ws["D14"].value == "material: ceramic composite with copper-free backing plate"

    def test_short_specifications_keep_base_height(self):
        ws = _sheet()
        data = make_single_export(part_count=1)
        data.parts = make_parts(1, specifications={"size": "M"})
        apply_generic_template(ws, data)

        assert ws.row_dimensions[14].height == 25

    def test_even_rows_shaded(self):
        ws = _sheet()
        apply_generic_template(ws, make_single_export(part_count=3))

        assert ws["A14"].fill.fill_type is None
        assert ws["A15"].fill.fill_type == "solid"
        assert ws["A16"].fill.fill_type is None

    def test_color_override(self):
        ws = _sheet()
        config = TemplateConfig(colors={"altRowBg": "FF0000"})
        apply_generic_template(ws, make_single_export(part_count=2), config=config)

        assert ws["A15"].fill.start_color.rgb.endswith("FF0000")

    def test_deterministic(self):
        """Same input should produce identical cells."""
        first, second = _sheet(), _sheet()
        apply_generic_template(first, make_single_export(part_count=4))
        apply_generic_template(second, make_single_export(part_count=4))

        assert _values(first) == _values(second)

    def test_logo_embedded_instead_of_placeholder(self):
        buffer = BytesIO()
        PILImage.new("RGB", (300, 100), "white").save(buffer, format="PNG")
        logo = LogoAsset(buffer=buffer.getvalue(), extension="png", width=150, height=50)

        ws = _sheet()
        apply_generic_template(ws, make_single_export(part_count=1), logo=logo)

        assert ws["A1"].value is None
        assert len(ws._images) == 1


class TestGenericMultiLayout:
    """Tests for apply_generic_template_multi()."""

    def test_order_column_and_continuing_ordinals(self):
        ws = _sheet()
        layout = apply_generic_template_multi(ws, make_multi_export([2, 3]))

        assert ws["A13"].value == "Order #"
        assert ws["B13"].value == "Item #"
        assert ws["A14"].value == "ORD-001"
        assert ws["A16"].value == "ORD-002"
        assert ws["B18"].value == 5
        assert layout.last_item_row == 18
        assert layout.last_column == 10

    def test_totals_use_shifted_columns(self):
        ws = _sheet()
        layout = apply_generic_template_multi(ws, make_multi_export([2, 3]))

        assert ws["H14"].value == "=F14*G14"
        assert layout.subtotal_cell == "H20"
        assert ws["H20"].value == "=SUM(H14:H18)"

    def test_header_lists_orders_and_date_range(self):
        ws = _sheet()
        apply_generic_template_multi(ws, make_multi_export([1, 1, 1]))

        assert ws["A4"].value == "PURCHASE ORDER REQUESTS - COMBINED QUOTE"
        assert ws["A6"].value == "Orders: ORD-001, ORD-002, ORD-003"
        assert ws["A7"].value == "Order Dates: 01/03/2025 - 03/03/2025"

    def test_quote_deadline_from_earliest_order(self):
        ws = _sheet()
        layout = apply_generic_template_multi(ws, make_multi_export([1, 1]))

        terms_row = int(layout.grand_total_cell[1:]) + 2
        assert ws.cell(row=terms_row + 1, column=1).value == "- Please provide complete quote by: 08/03/2025"

    def test_print_area_covers_ten_columns(self):
        ws = _sheet()
        layout = apply_generic_template_multi(ws, make_multi_export([2]))

        assert layout.print_area.startswith("A1:J")
        assert layout.print_area == f"A1:J{layout.last_row + 2}"
