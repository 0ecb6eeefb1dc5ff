"""
Generic supplier template.

Used for every supplier without a dedicated layout. The single- and
multi-order variants share one layout routine; the multi variant adds an
"Order #" column and lists the batch in the header.

Layout (single):
    1-2   logo / issuer block
    4     title
    6-7   order number, dates
    9-11  supplier contact block
    13    column headers
    14+   one row per line item
    then  subtotal / shipping / (tax) / grand total, terms, sign-off
"""

from decimal import Decimal
from typing import Optional

from openpyxl.styles import Alignment, Font
from openpyxl.worksheet.worksheet import Worksheet

from models.order_export import (
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
    format_date_range,
    format_percent,
    format_specifications,
    get_quote_deadline,
    merge_overrides,
    product_formula,
    spec_row_height,
    sum_formula,
)

GENERIC_COLORS = {
    "header_bg": "E8F4F8",
    "alt_row_bg": "F9F9F9",
    "border_color": "D0D0D0",
    "total_bg": "FFF9E6",
}

GENERIC_COLUMN_WIDTHS = {
    "order_number": 12,
    "item_no": 8,
    "part_number": 18,
    "description": 40,
    "specifications": 28,
    "quantity": 8,
    "unit_price": 15,
    "total": 15,
    "lead_time": 18,
    "notes": 20,
}

GENERIC_HEADERS = {
    "order_number": "Order #",
    "item_no": "Item #",
    "part_number": "Part Number",
    "description": "Description",
    "specifications": "Specifications",
    "quantity": "Qty",
    "unit_price": "Unit Price (JPY)",
    "total": "Total (JPY)",
    "lead_time": "Supplier Lead Time",
    "notes": "Notes",
}

HEADER_ROW = 13
BASE_ROW_HEIGHT = 25
YEN = currency_number_format("¥")


def apply_generic_template(
    ws: Worksheet,
    data: OrderExportData,
    config: Optional[TemplateConfig] = None,
    logo: Optional[LogoAsset] = None,
) -> TemplateLayout:
    """Lay out a single order on `ws`."""
    order = data.order
    date_line = f"Order Date: {format_date_for_excel(order.order_date)}"
    if order.expected_delivery:
        date_line += f"  |  Expected Delivery: {format_date_for_excel(order.expected_delivery)}"

    return _apply_layout(
        ws,
        supplier=data.supplier,
        company=data.company,
        bundles=[OrderBundle(order=order, parts=data.parts)],
        multi=False,
        title="PURCHASE ORDER REQUEST - QUOTE",
        orders_line=f"Order: {order.order_number}",
        date_line=date_line,
        config=config,
        logo=logo,
    )


def apply_generic_template_multi(
    ws: Worksheet,
    data: MultiOrderExportData,
    config: Optional[TemplateConfig] = None,
    logo: Optional[LogoAsset] = None,
) -> TemplateLayout:
    """Lay out a batch of same-supplier orders on `ws`."""
    date_range = format_date_range(data.earliest_order_date, data.latest_order_date)

    return _apply_layout(
        ws,
        supplier=data.supplier,
        company=data.company,
        bundles=data.orders,
        multi=True,
        title="PURCHASE ORDER REQUESTS - COMBINED QUOTE",
        orders_line=f"Orders: {', '.join(data.order_numbers)}",
        date_line=f"Order Dates: {date_range}",
        config=config,
        logo=logo,
    )


def _apply_layout(
    ws: Worksheet,
    supplier: SupplierProfile,
    company: CompanyInfo,
    bundles: list[OrderBundle],
    multi: bool,
    title: str,
    orders_line: str,
    date_line: str,
    config: Optional[TemplateConfig],
    logo: Optional[LogoAsset],
) -> TemplateLayout:
    colors = merge_overrides(GENERIC_COLORS, config.colors if config else None)
    widths = merge_overrides(GENERIC_COLUMN_WIDTHS, config.column_widths if config else None)
    tax_rate = config.tax_rate if config else None

    columns = [key for key in GENERIC_HEADERS if multi or key != "order_number"]
    col = {key: index for index, key in enumerate(columns, start=1)}
    last_column = len(columns)

    set_column_widths(ws, [widths[key] for key in columns])

    _add_header(ws, supplier, company, title, orders_line, date_line, last_column, colors, logo)
    first_item_row = HEADER_ROW + 1
    last_item_row = _add_items(ws, bundles, columns, col, colors)

    subtotal_cell, grand_total_cell, footer_row = _add_totals(
        ws, col, last_item_row, first_item_row, colors, tax_rate
    )

    earliest = min(bundle.order.order_date for bundle in bundles)
    terms_end = add_terms_block(
        ws,
        footer_row + 2,
        last_column,
        quote_deadline=get_quote_deadline(earliest, QUOTE_DEADLINE_DAYS),
        payment_terms=supplier.payment_terms,
    )
    last_row = add_signoff_block(ws, terms_end + 3, last_column, right_label_column=col["quantity"] - 1)

    freeze_cell, print_area = configure_page_setup(ws, HEADER_ROW, last_column, last_row)

    return TemplateLayout(
        header_row=HEADER_ROW,
        first_item_row=first_item_row,
        last_item_row=last_item_row,
        subtotal_cell=subtotal_cell,
        grand_total_cell=grand_total_cell,
        last_row=last_row,
        last_column=last_column,
        freeze_cell=freeze_cell,
        print_area=print_area,
    )


def _add_header(
    ws: Worksheet,
    supplier: SupplierProfile,
    company: CompanyInfo,
    title: str,
    orders_line: str,
    date_line: str,
    last_column: int,
    colors: dict,
    logo: Optional[LogoAsset],
) -> None:
    # Logo box
    ws.merge_cells("A1:B2")
    place_logo(ws, logo, "A1", Font(size=9, color="999999"))
    for row in (1, 2):
        style_range(ws, row, 1, 2, border=box_border(colors["border_color"]))

    # Issuer block
    issuer_lines = [company.name, company.address, company.contact_line]
    write_merged(
        ws, 1, 3, 2, last_column,
        "\n".join(line for line in issuer_lines if line),
        font=Font(size=11),
        alignment=Alignment(horizontal="right", vertical="center", wrap_text=True),
    )
    ws.row_dimensions[1].height = 30
    ws.row_dimensions[2].height = 30
    ws.row_dimensions[3].height = 5

    centered = Alignment(horizontal="center", vertical="center")
    write_merged(ws, 4, 1, 4, last_column, title, font=Font(size=18, bold=True), alignment=centered)
    ws.row_dimensions[4].height = 28
    ws.row_dimensions[5].height = 5

    write_merged(ws, 6, 1, 6, last_column, orders_line, font=Font(size=11, bold=True), alignment=centered)
    write_merged(ws, 7, 1, 7, last_column, date_line, font=Font(size=10), alignment=centered)
    ws.row_dimensions[8].height = 5

    # Supplier contact block
    bold = Font(bold=True)
    contact_rows = [
        (9, "Supplier:", supplier.name, "Contact:", supplier.contact_person),
        (10, "Email:", supplier.email, "Phone:", supplier.phone),
        (11, "Payment Terms:", supplier.payment_terms, "Address:", supplier.address),
    ]
    for row, left_label, left_value, right_label, right_value in contact_rows:
        ws.cell(row=row, column=1, value=left_label).font = bold
        ws.cell(row=row, column=2, value=left_value or "")
        ws.cell(row=row, column=5, value=right_label).font = bold
        ws.cell(row=row, column=6, value=right_value or "")

    ws.row_dimensions[12].height = 10


def _add_items(
    ws: Worksheet,
    bundles: list[OrderBundle],
    columns: list[str],
    col: dict[str, int],
    colors: dict,
) -> int:
    """Column headers plus one row per line item. Returns the last item row."""
    last_column = len(columns)
    border = box_border(colors["border_color"])
    header_fill = solid_fill(colors["header_bg"])
    alt_fill = solid_fill(colors["alt_row_bg"])

    for key in columns:
        cell = ws.cell(row=HEADER_ROW, column=col[key], value=GENERIC_HEADERS[key])
        cell.font = Font(bold=True, size=10)
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    style_range(ws, HEADER_ROW, 1, last_column, border=border, fill=header_fill)
    ws.row_dimensions[HEADER_ROW].height = 30

    row = HEADER_ROW
    item_number = 0
    for bundle in bundles:
        for part in bundle.parts:
            row += 1
            item_number += 1
            specs = format_specifications(part.specifications)
            description = part.name
            if part.description and part.description != part.name:
                description = f"{part.name} - {part.description}"

            if "order_number" in col:
                ws.cell(row=row, column=col["order_number"], value=bundle.order.order_number).alignment = Alignment(horizontal="center")
            ws.cell(row=row, column=col["item_no"], value=item_number).alignment = Alignment(horizontal="center")
            ws.cell(row=row, column=col["part_number"], value=part.part_number)
            ws.cell(row=row, column=col["description"], value=description).alignment = Alignment(wrap_text=True, vertical="top")
            ws.cell(row=row, column=col["specifications"], value=specs).alignment = Alignment(wrap_text=True, vertical="top")
            ws.cell(row=row, column=col["quantity"], value=part.quantity).alignment = Alignment(horizontal="center")

            # Left blank for the supplier
            ws.cell(row=row, column=col["unit_price"]).number_format = YEN
            total = ws.cell(
                row=row,
                column=col["total"],
                value=product_formula(cell_ref(col["quantity"], row), cell_ref(col["unit_price"], row)),
            )
            total.number_format = YEN
            ws.cell(row=row, column=col["lead_time"]).alignment = Alignment(horizontal="center")

            is_alt_row = item_number % 2 == 0
            style_range(ws, row, 1, last_column, border=border, fill=alt_fill if is_alt_row else None)
            ws.row_dimensions[row].height = spec_row_height(specs, BASE_ROW_HEIGHT)

    return row


def _add_totals(
    ws: Worksheet,
    col: dict[str, int],
    last_item_row: int,
    first_item_row: int,
    colors: dict,
    tax_rate: Optional[Decimal],
) -> tuple[str, str, int]:
    """
    Subtotal, shipping, optional tax and grand total.

    Returns (subtotal_cell, grand_total_cell, last footer row).
    """
    label_col = col["unit_price"]
    value_col = col["total"]
    right = Alignment(horizontal="right")

    def label(row: int, text: str, font: Font) -> None:
        cell = ws.cell(row=row, column=label_col, value=text)
        cell.font = font
        cell.alignment = right

    row = last_item_row + 2
    label(row, "Subtotal:", Font(bold=True))
    subtotal = ws.cell(row=row, column=value_col, value=sum_formula(value_col, first_item_row, last_item_row))
    subtotal.number_format = YEN
    subtotal.font = Font(bold=True)
    subtotal_cell = cell_ref(value_col, row)

    row += 1
    label(row, "Shipping (Est):", Font(bold=True))
    ws.cell(row=row, column=value_col).number_format = YEN
    shipping_cell = cell_ref(value_col, row)
    parts = [subtotal_cell, shipping_cell]

    if tax_rate is not None:
        row += 1
        label(row, f"Tax ({format_percent(tax_rate)}):", Font(bold=True))
        tax = ws.cell(row=row, column=value_col, value=f"={subtotal_cell}*{tax_rate}")
        tax.number_format = YEN
        parts.append(cell_ref(value_col, row))

    row += 1
    label(row, "GRAND TOTAL:", Font(bold=True, size=12))
    grand = ws.cell(row=row, column=value_col, value=add_formula(*parts))
    grand.number_format = YEN
    grand.font = Font(bold=True, size=12)
    grand.fill = solid_fill(colors["total_bg"])
    grand.border = box_border("000000", style="double")

    return subtotal_cell, cell_ref(value_col, row), row
