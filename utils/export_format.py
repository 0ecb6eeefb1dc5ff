"""
Formatting helpers shared by the export templates.

Dates, specification text, number formats, filenames and cell
coordinates. Everything here is pure.
"""

import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence, Union

from openpyxl.utils import get_column_letter


SPEC_WRAP_THRESHOLD = 50
TALL_ROW_HEIGHT = 40
FILENAME_MAX_LISTED_ORDERS = 3

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_]")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


# ===================
# DATES
# ===================

def _as_date(value: Union[date, str]) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def format_date_for_excel(value: Union[date, str, None]) -> str:
    """
    Format a date the way suppliers read it: DD/MM/YYYY.

    '2025-03-07' -> '07/03/2025'
    """
    if not value:
        return ""
    return _as_date(value).strftime("%d/%m/%Y")


def format_date_range(start: date, end: date) -> str:
    """Single date when both ends match, otherwise 'start - end'."""
    if start == end:
        return format_date_for_excel(start)
    return f"{format_date_for_excel(start)} - {format_date_for_excel(end)}"


def get_quote_deadline(order_date: Union[date, str], days: int = 7) -> str:
    """Date the supplier must quote by: order date plus `days`."""
    return format_date_for_excel(_as_date(order_date) + timedelta(days=days))


def format_specifications(specs: Optional[Mapping[str, Any]]) -> str:
    """
    Flatten a specification mapping to one 'key: value' line per entry.

    Keeps the mapping's own order so output is stable for a given record.
    """
    if not specs:
        return ""
    return "\n".join(f"{key}: {value}" for key, value in specs.items())


def spec_row_height(specs_text: str, base_height: float) -> float:
    """Taller rows for specification text that would wrap and clip."""
    if len(specs_text) > SPEC_WRAP_THRESHOLD:
        return TALL_ROW_HEIGHT
    return base_height


def currency_number_format(symbol: str = "¥") -> str:
    """Excel number format for whole-unit currency amounts."""
    return f"{symbol}#,##0"


def format_percent(rate: Union[Decimal, float]) -> str:
    """Rate as a percentage label without trailing zeros: 0.10 -> 10%, 0.085 -> 8.5%."""
    percent = (Decimal(str(rate)) * 100).normalize()
    return f"{percent:f}%"


# ===================
# FILENAMES
# ===================

def sanitize_filename_part(text: str) -> str:
    """Replace everything outside [A-Za-z0-9_] with underscores."""
    return _UNSAFE_FILENAME_CHARS.sub("_", text or "")


def generate_export_filename(
    supplier_name: str,
    order_numbers: Sequence[str],
    export_date: date,
) -> str:
    """
    Build the attachment filename for an export.

    - 1 order:   PO_Request_<supplier>_<order>_<date>.xlsx
    - 2-3:       order numbers joined by underscores
    - more:      Combined_<N>_Orders
    """
    supplier = sanitize_filename_part(supplier_name)

    if len(order_numbers) > FILENAME_MAX_LISTED_ORDERS:
        orders_part = f"Combined_{len(order_numbers)}_Orders"
    else:
        orders_part = "_".join(sanitize_filename_part(n) for n in order_numbers)

    return f"PO_Request_{supplier}_{orders_part}_{export_date.isoformat()}.xlsx"


# ===================
# CELL COORDINATES
# ===================

def cell_ref(column: int, row: int) -> str:
    """(3, 14) -> 'C14'"""
    return f"{get_column_letter(column)}{row}"


def range_ref(first_column: int, first_row: int, last_column: int, last_row: int) -> str:
    """(1, 1, 10, 40) -> 'A1:J40'"""
    return f"{cell_ref(first_column, first_row)}:{cell_ref(last_column, last_row)}"


def product_formula(left: str, right: str) -> str:
    return f"={left}*{right}"


def sum_formula(column: int, first_row: int, last_row: int) -> str:
    return f"=SUM({range_ref(column, first_row, column, last_row)})"


def add_formula(*cells: str) -> str:
    return "=" + "+".join(cells)


# ===================
# CONFIG OVERRIDES
# ===================

def merge_overrides(defaults: Mapping[str, Any], overrides: Optional[Mapping[str, Any]]) -> dict:
    """
    Overlay supplier overrides on template defaults.

    Keys may be camelCase or snake_case; keys the template doesn't know
    and empty values are ignored.
    """
    merged = dict(defaults)
    for key, value in (overrides or {}).items():
        snake = _CAMEL_BOUNDARY.sub("_", key).lower()
        if snake in merged and value not in (None, ""):
            merged[snake] = value
    return merged
