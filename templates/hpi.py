"""
HPI supplier template.

Mirrors the order form HPI sends back: a large ORDER title, a boxed
purchasing block, product name and part number spread over merged
columns, Retail / Discount / unit Price / Cost pricing columns, and the
supplier's bank details under the totals. Japanese consumption tax is
added to the total (10% unless the supplier config says otherwise).
"""

from decimal import Decimal
from typing import Optional

from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.worksheet.worksheet import Worksheet

from models.order_export import (
    BankInfo,
    CompanyInfo,
    LogoAsset,
    MultiOrderExportData,
    OrderBundle,
    OrderExportData,
    SupplierProfile,
    TemplateConfig,
)
from templates.base import (
    QUOTE_DEADLINE_DAYS,
    TemplateLayout,
    add_signoff_block,
    add_terms_block,
    box_border,
    configure_page_setup,
    place_logo,
    set_column_widths,
    solid_fill,
    style_range,
    write_merged,
)
from utils.export_format import (
    add_formula,
    cell_ref,
    currency_number_format,
    format_date_for_excel,
    format_percent,
    format_specifications,
    get_quote_deadline,
    merge_overrides,
    product_formula,
    spec_row_height,
    sum_formula,
)

FONT = "Arial"

HPI_COLORS = {
    "border_color": "000000",
    "header_bg": "FFFFFF",
    "alt_row_bg": "F2F2F2",
}

HPI_COLUMN_WIDTHS = {
    "order_number": 12,
    "item_no": 6,
    "product_name_a": 20,
    "product_name_b": 15,
    "product_name_c": 15,
    "part_number_a": 12,
    "part_number_b": 12,
    "qty": 6,
    "retail": 12,
    "discount": 10,
    "unit_price": 12,
    "cost": 12,
    "delivery": 14,
    "remarks": 30,
}

HPI_DEFAULT_BANK = BankInfo(
    bank_name="Bank of Mitsubishi UFJ",
    branch_number="463",
    branch_name="Komatsugawa Branch",
    account_number="0824029",
    account_name="HPI Co., Ltd.",
    swift_code="BOTKJPJT",
)

DEFAULT_TAX_RATE = Decimal("0.10")
HEADER_ROW = 11
BASE_ROW_HEIGHT = 20
BANK_BLOCK_ROWS = 7
YEN = currency_number_format("¥")


def apply_hpi_template(
    ws: Worksheet,
    data: OrderExportData,
    config: Optional[TemplateConfig] = None,
    logo: Optional[LogoAsset] = None,
) -> TemplateLayout:
    """Lay out a single order in HPI's format."""
    return _apply_layout(
        ws,
        supplier=data.supplier,
        company=data.company,
        bundles=[OrderBundle(order=data.order, parts=data.parts)],
        multi=False,
        config=config,
        logo=logo,
    )


def apply_hpi_template_multi(
    ws: Worksheet,
    data: MultiOrderExportData,
    config: Optional[TemplateConfig] = None,
    logo: Optional[LogoAsset] = None,
) -> TemplateLayout:
    """Lay out a batch of HPI orders; an Order # column leads each row."""
    return _apply_layout(
        ws,
        supplier=data.supplier,
        company=data.company,
        bundles=data.orders,
        multi=True,
        config=config,
        logo=logo,
    )


class _Columns:
    """Column positions; everything shifts right by one in the multi layout."""

    def __init__(self, multi: bool):
        offset = 1 if multi else 0
        self.order_number = 1 if multi else None
        self.item_no = 1 + offset
        self.product_first = 2 + offset
        self.product_last = 4 + offset
        self.part_first = 5 + offset
        self.part_last = 6 + offset
        self.qty = 7 + offset
        self.retail = 8 + offset
        self.discount = 9 + offset
        self.unit_price = 10 + offset
        self.cost = 11 + offset
        self.delivery = 12 + offset
        self.remarks = 13 + offset
        self.last = self.remarks

    def width_keys(self) -> list[str]:
        keys = list(HPI_COLUMN_WIDTHS)
        return keys if self.order_number else keys[1:]


def _apply_layout(
    ws: Worksheet,
    supplier: SupplierProfile,
    company: CompanyInfo,
    bundles: list[OrderBundle],
    multi: bool,
    config: Optional[TemplateConfig],
    logo: Optional[LogoAsset],
) -> TemplateLayout:
    colors = merge_overrides(HPI_COLORS, config.colors if config else None)
    widths = merge_overrides(HPI_COLUMN_WIDTHS, config.column_widths if config else None)
    tax_rate = config.tax_rate if config and config.tax_rate is not None else DEFAULT_TAX_RATE
    purchaser = (config.purchaser if config and config.purchaser else None) or company.purchaser
    cols = _Columns(multi)

    set_column_widths(ws, [widths[key] for key in cols.width_keys()])

    _add_header(ws, supplier, company, bundles, cols, colors, purchaser, logo)
    first_item_row = HEADER_ROW + 1
    last_item_row = _add_items(ws, bundles, cols, colors)

    subtotal_cell, grand_total_cell, footer_row = _add_totals(
        ws, cols, first_item_row, last_item_row, colors, tax_rate
    )
    bank_end = _add_bank_block(
        ws, footer_row + 2, cols, colors,
        config.bank_info if config else None,
    )

    earliest = min(bundle.order.order_date for bundle in bundles)
    terms_end = add_terms_block(
        ws,
        bank_end + 2,
        cols.last,
        quote_deadline=get_quote_deadline(earliest, QUOTE_DEADLINE_DAYS),
        payment_terms=supplier.payment_terms,
        font_name=FONT,
    )
    last_row = add_signoff_block(ws, terms_end + 3, cols.last, right_label_column=cols.qty, font_name=FONT)

    freeze_cell, print_area = configure_page_setup(ws, HEADER_ROW, cols.last, last_row)

    return TemplateLayout(
        header_row=HEADER_ROW,
        first_item_row=first_item_row,
        last_item_row=last_item_row,
        subtotal_cell=subtotal_cell,
        grand_total_cell=grand_total_cell,
        last_row=last_row,
        last_column=cols.last,
        freeze_cell=freeze_cell,
        print_area=print_area,
    )


def _add_header(
    ws: Worksheet,
    supplier: SupplierProfile,
    company: CompanyInfo,
    bundles: list[OrderBundle],
    cols: _Columns,
    colors: dict,
    purchaser: Optional[str],
    logo: Optional[LogoAsset],
) -> None:
    write_merged(
        ws, 1, cols.product_first, 1, cols.product_last,
        "ORDER",
        font=Font(name=FONT, size=36, bold=True),
        alignment=Alignment(horizontal="center", vertical="center"),
    )
    ws.row_dimensions[1].height = 35
    place_logo(ws, logo, cell_ref(cols.part_first, 1), Font(name=FONT, size=9, color="999999"))
    ws.row_dimensions[2].height = 20

    # Purchasing block
    purchasing_lines = [
        f"Purchasing name : {company.name}",
        company.address,
        company.contact_line,
    ]
    write_merged(
        ws, 3, 1, 9, cols.product_last,
        "\n".join(line for line in purchasing_lines if line),
        font=Font(name=FONT, size=11),
        alignment=Alignment(horizontal="left", vertical="top", wrap_text=True),
    )
    medium = box_border(colors["border_color"], style="medium")
    for row in range(3, 10):
        style_range(ws, row, 1, cols.product_last, border=medium)

    small = Font(name=FONT, size=10)
    earliest = min(bundle.order.order_date for bundle in bundles)
    date_cell = ws.cell(row=3, column=cols.discount, value=format_date_for_excel(earliest))
    date_cell.font = small
    date_cell.alignment = Alignment(horizontal="right")

    order_numbers = ", ".join(bundle.order.order_number for bundle in bundles)
    deliveries = sorted({b.order.expected_delivery for b in bundles if b.order.expected_delivery})
    info_lines = [
        (5, f"Purchaser: {purchaser or ''}".rstrip()),
        (6, f"Estimate No,{order_numbers}"),
        (7, f"Supplier: {supplier.name}"),
        (8, f"Attn: {supplier.contact_person or ''}".rstrip()),
        (9, f"Delivery: {format_date_for_excel(deliveries[0])}" if deliveries else "Delivery: TBC"),
    ]
    for row, text in info_lines:
        cell = ws.cell(row=row, column=cols.part_first, value=text)
        cell.font = small
        cell.alignment = Alignment(horizontal="left")

    ws.row_dimensions[10].height = 5


def _add_items(ws: Worksheet, bundles: list[OrderBundle], cols: _Columns, colors: dict) -> int:
    border = box_border(colors["border_color"])
    alt_fill = solid_fill(colors["alt_row_bg"])
    header_font = Font(name=FONT, bold=True, size=10)
    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    row = HEADER_ROW
    headers = [
        (cols.item_no, "No."),
        (cols.product_first, "Product Name"),
        (cols.part_first, "Part Number"),
        (cols.qty, "QTY"),
        (cols.retail, "Retail"),
        (cols.discount, "Discount"),
        (cols.unit_price, "unit Price"),
        (cols.cost, "Cost"),
        (cols.delivery, "delivery"),
        (cols.remarks, "Remarks"),
    ]
    if cols.order_number:
        headers.insert(0, (cols.order_number, "Order #"))

    ws.merge_cells(f"{cell_ref(cols.product_first, row)}:{cell_ref(cols.product_last, row)}")
    ws.merge_cells(f"{cell_ref(cols.part_first, row)}:{cell_ref(cols.part_last, row)}")
    for column, text in headers:
        cell = ws.cell(row=row, column=column, value=text)
        cell.font = header_font
        cell.alignment = header_alignment
    style_range(ws, row, 1, cols.last, border=border, fill=solid_fill(colors["header_bg"]))
    ws.row_dimensions[row].height = 20

    body_font = Font(name=FONT, size=10)
    item_number = 0
    for bundle in bundles:
        for part in bundle.parts:
            row += 1
            item_number += 1
            specs = format_specifications(part.specifications)

            ws.merge_cells(f"{cell_ref(cols.product_first, row)}:{cell_ref(cols.product_last, row)}")
            ws.merge_cells(f"{cell_ref(cols.part_first, row)}:{cell_ref(cols.part_last, row)}")

            values = [
                (cols.item_no, item_number, Alignment(horizontal="center", vertical="center")),
                (cols.product_first, f"{part.name} {part.part_number}", Alignment(horizontal="left", vertical="center", wrap_text=True)),
                (cols.part_first, part.part_number, Alignment(horizontal="right", vertical="center")),
                (cols.qty, part.quantity, Alignment(horizontal="center", vertical="center")),
                (cols.remarks, specs, Alignment(vertical="top", wrap_text=True)),
            ]
            if cols.order_number:
                values.insert(0, (cols.order_number, bundle.order.order_number, Alignment(horizontal="center", vertical="center")))

            for column, value, alignment in values:
                cell = ws.cell(row=row, column=column, value=value)
                cell.font = body_font
                cell.alignment = alignment

            # Pricing is the supplier's to fill; only Cost is computed
            ws.cell(row=row, column=cols.retail).number_format = YEN
            ws.cell(row=row, column=cols.discount).number_format = "0%"
            ws.cell(row=row, column=cols.unit_price).number_format = YEN
            cost = ws.cell(
                row=row,
                column=cols.cost,
                value=product_formula(cell_ref(cols.qty, row), cell_ref(cols.unit_price, row)),
            )
            cost.number_format = YEN
            cost.font = body_font

            is_alt_row = item_number % 2 == 0
            style_range(ws, row, 1, cols.last, border=border, fill=alt_fill if is_alt_row else None)
            ws.row_dimensions[row].height = spec_row_height(specs, BASE_ROW_HEIGHT)

    return row


def _add_totals(
    ws: Worksheet,
    cols: _Columns,
    first_item_row: int,
    last_item_row: int,
    colors: dict,
    tax_rate: Decimal,
) -> tuple[str, str, int]:
    label_col = cols.unit_price
    value_col = cols.cost
    font = Font(name=FONT, size=10)

    def line(row: int, label: str, value=None, bold: bool = False):
        label_cell = ws.cell(row=row, column=label_col, value=label)
        label_cell.font = Font(name=FONT, size=10, bold=bold)
        label_cell.alignment = Alignment(horizontal="left")
        cell = ws.cell(row=row, column=value_col, value=value)
        cell.number_format = YEN
        cell.font = font
        return cell_ref(value_col, row)

    row = last_item_row + 2
    subtotal_cell = line(row, "subtotal", sum_formula(value_col, first_item_row, last_item_row))
    row += 1
    shipping_cell = line(row, "shipping")
    row += 1
    tax_cell = line(row, f"tax ({format_percent(tax_rate)})", f"={subtotal_cell}*{tax_rate}")
    row += 2
    grand_total_cell = line(row, "TOTAL", add_formula(subtotal_cell, shipping_cell, tax_cell), bold=True)

    side = Side(style="thin", color=colors["border_color"])
    ws[grand_total_cell].border = Border(top=side, bottom=side)
    ws[grand_total_cell].font = Font(name=FONT, size=10, bold=True)

    return subtotal_cell, grand_total_cell, row


def _add_bank_block(
    ws: Worksheet,
    start_row: int,
    cols: _Columns,
    colors: dict,
    bank: Optional[BankInfo],
) -> int:
    """Bank details box under the totals. Returns its last row."""
    defaults = HPI_DEFAULT_BANK.model_dump()
    values = merge_overrides(defaults, bank.model_dump() if bank else None)

    text = "\n".join([
        "Bank Information",
        values["bank_name"],
        f"Branch Number: {values['branch_number']}",
        f"Branch Name: {values['branch_name']}",
        f"Account Number: {values['account_number']}",
        f"Account Name: {values['account_name']}",
        f"Swift Code: {values['swift_code']}",
    ])

    end_row = start_row + BANK_BLOCK_ROWS - 1
    write_merged(
        ws, start_row, cols.qty, end_row, cols.unit_price,
        text,
        font=Font(name=FONT, size=10),
        alignment=Alignment(horizontal="center", vertical="top", wrap_text=True),
    )
    border = box_border(colors["border_color"])
    for row in range(start_row, end_row + 1):
        style_range(ws, row, cols.qty, cols.unit_price, border=border)

    return end_row
