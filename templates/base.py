"""
Building blocks shared by the supplier templates.

Styles, the terms and sign-off blocks, logo placement and print
geometry. Template modules compose these; they never hard-code a row
that depends on how many line items an order has.
"""

from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from openpyxl.drawing.image import Image
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.page import PageMargins
from openpyxl.worksheet.worksheet import Worksheet

from models.order_export import LogoAsset
from utils.export_format import range_ref

PRINT_MARGIN_ROWS = 2
QUOTE_DEADLINE_DAYS = 7
SIGNATURE_LINE = "____________________"
SHORT_LINE = "____________"


@dataclass(frozen=True)
class TemplateLayout:
    """Geometry a template produced; row numbers are 1-based."""

    header_row: int
    first_item_row: int
    last_item_row: int
    subtotal_cell: str
    grand_total_cell: str
    last_row: int
    last_column: int
    freeze_cell: str
    print_area: str

    @property
    def item_count(self) -> int:
        return self.last_item_row - self.first_item_row + 1


# ===================
# STYLES
# ===================

def box_border(color: str, style: str = "thin") -> Border:
    side = Side(style=style, color=color)
    return Border(left=side, right=side, top=side, bottom=side)


def solid_fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def set_column_widths(ws: Worksheet, widths: list[float]) -> None:
    for index, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width


def style_range(
    ws: Worksheet,
    row: int,
    first_column: int,
    last_column: int,
    border: Optional[Border] = None,
    fill: Optional[PatternFill] = None,
) -> None:
    """Apply border/fill to every cell of one row segment, merged or not."""
    for column in range(first_column, last_column + 1):
        cell = ws.cell(row=row, column=column)
        if border is not None:
            cell.border = border
        if fill is not None:
            cell.fill = fill


def write_merged(
    ws: Worksheet,
    first_row: int,
    first_column: int,
    last_row: int,
    last_column: int,
    value,
    font: Optional[Font] = None,
    alignment: Optional[Alignment] = None,
):
    """Merge a block and write its top-left cell."""
    ws.merge_cells(range_ref(first_column, first_row, last_column, last_row))
    cell = ws.cell(row=first_row, column=first_column, value=value)
    if font is not None:
        cell.font = font
    if alignment is not None:
        cell.alignment = alignment
    return cell


# ===================
# LOGO
# ===================

def place_logo(ws: Worksheet, logo: Optional[LogoAsset], anchor: str, placeholder_font: Font) -> bool:
    """
    Embed the logo at `anchor`, or write a LOGO placeholder there.

    Returns True when an image was embedded.
    """
    if logo is None:
        cell = ws[anchor]
        cell.value = "LOGO"
        cell.font = placeholder_font
        cell.alignment = Alignment(horizontal="center", vertical="center")
        return False

    image = Image(BytesIO(logo.buffer))
    image.width = logo.width
    image.height = logo.height
    ws.add_image(image, anchor)
    return True


# ===================
# TERMS / SIGN-OFF
# ===================

def add_terms_block(
    ws: Worksheet,
    start_row: int,
    last_column: int,
    quote_deadline: str,
    payment_terms: Optional[str],
    currency: str = "JPY",
    font_name: Optional[str] = None,
) -> int:
    """Write the terms and conditions block. Returns the last row used."""
    row = start_row
    write_merged(
        ws, row, 1, row, last_column,
        "TERMS AND CONDITIONS:",
        font=Font(name=font_name, bold=True, size=11),
    )

    terms = [
        f"- Please provide complete quote by: {quote_deadline}",
        "- Include lead times for all items",
        f"- Prices should be in {currency}",
        f"- Payment terms: {payment_terms or 'To be confirmed'}",
        "- Please indicate any minimum order quantities",
    ]
    for term in terms:
        row += 1
        write_merged(ws, row, 1, row, last_column, term, font=Font(name=font_name, size=10))

    return row


def add_signoff_block(
    ws: Worksheet,
    start_row: int,
    last_column: int,
    right_label_column: int,
    font_name: Optional[str] = None,
) -> int:
    """Blank lines for the supplier to complete. Returns the last row used."""
    row = start_row
    write_merged(
        ws, row, 1, row, last_column,
        "SUPPLIER TO COMPLETE AND RETURN:",
        font=Font(name=font_name, bold=True, size=11),
    )
    row += 2

    lines = [
        ("Quoted By:", "Date:"),
        ("Company:", "Valid Until:"),
        ("Signature:", None),
    ]
    label_font = Font(name=font_name, size=10, bold=True)
    for index, (left, right) in enumerate(lines):
        if index:
            row += 2
        ws.cell(row=row, column=1, value=left).font = label_font
        ws.cell(row=row, column=2, value=SIGNATURE_LINE)
        if right:
            ws.cell(row=row, column=right_label_column, value=right).font = label_font
            ws.cell(row=row, column=right_label_column + 1, value=SHORT_LINE)

    return row


# ===================
# PRINT GEOMETRY
# ===================

def configure_page_setup(ws: Worksheet, header_row: int, last_column: int, last_row: int) -> tuple[str, str]:
    """
    Landscape A4, one page wide, header rows frozen and repeated.

    Returns (freeze_cell, print_area).
    """
    ws.page_setup.orientation = ws.ORIENTATION_LANDSCAPE
    ws.page_setup.paperSize = ws.PAPERSIZE_A4
    ws.page_setup.fitToWidth = 1
    ws.page_setup.fitToHeight = 0
    ws.sheet_properties.pageSetUpPr.fitToPage = True
    ws.page_margins = PageMargins(left=0.7, right=0.7, top=0.75, bottom=0.75, header=0.3, footer=0.3)

    freeze_cell = f"A{header_row + 1}"
    ws.freeze_panes = freeze_cell
    ws.print_title_rows = f"1:{header_row}"

    print_area = range_ref(1, 1, last_column, last_row + PRINT_MARGIN_ROWS)
    ws.print_area = print_area
    return freeze_cell, print_area
