"""
Order export schemas.

The export model is what the template functions lay out: one supplier,
the issuing company, and one or more orders with their part line items.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.base import BaseSchema


MAX_ORDERS_PER_EXPORT = 10


def _coerce_date(value: Any) -> Any:
    """Accept timestamp strings from the store where a date is expected."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        return value[:10]
    return value


# ===================
# SUPPLIER
# ===================

class BankInfo(BaseSchema):
    """Supplier bank details printed on supplier-specific templates."""

    bank_name: Optional[str] = None
    branch_number: Optional[str] = None
    branch_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    swift_code: Optional[str] = None


class TemplateConfig(BaseModel):
    """
    Supplier-supplied overrides for a template.

    Every field is optional; templates merge what is present over their
    built-in defaults key by key.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    colors: Optional[dict[str, str]] = None
    column_widths: Optional[dict[str, float]] = Field(None, alias="columnWidths")
    bank_info: Optional[BankInfo] = None
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=1)
    purchaser: Optional[str] = None


class SupplierProfile(BaseSchema):
    """Supplier as seen by the export: contact block plus template choice."""

    id: str
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_terms: Optional[str] = None
    logo_url: Optional[str] = None
    export_template_type: Optional[str] = None
    template_config: Optional[TemplateConfig] = None


class CompanyInfo(BaseSchema):
    """Issuing company block."""

    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    purchaser: Optional[str] = None

    @property
    def contact_line(self) -> str:
        return " | ".join(part for part in (self.phone, self.email) if part)


# ===================
# ORDER
# ===================

class OrderInfo(BaseSchema):
    """Order header fields."""

    id: str
    order_number: str
    order_date: date
    expected_delivery: Optional[date] = None
    notes: Optional[str] = None
    priority: str = "medium"
    status: str = "pending"
    supplier_id: Optional[str] = None

    @field_validator("order_date", "expected_delivery", mode="before")
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        return _coerce_date(v)


class PartLineItem(BaseSchema):
    """One part on an order. unit_price is the reference price, never printed."""

    id: str
    part_number: str
    name: str
    description: Optional[str] = None
    specifications: dict[str, Any] = Field(default_factory=dict)
    quantity: int = Field(..., ge=0)
    unit_price: Optional[Decimal] = None

    @field_validator("specifications", mode="before")
    @classmethod
    def default_specifications(cls, v: Any) -> Any:
        return v or {}


class OrderBundle(BaseSchema):
    """An order together with its line items."""

    order: OrderInfo
    parts: list[PartLineItem]


# ===================
# EXPORT MODELS
# ===================

class OrderExportData(BaseSchema):
    """Single-order export model."""

    order: OrderInfo
    supplier: SupplierProfile
    company: CompanyInfo
    parts: list[PartLineItem] = Field(..., min_length=1)


class MultiOrderExportData(BaseSchema):
    """
    Batch export model.

    All orders must belong to `supplier`; the batch is rejected otherwise.
    """

    supplier: SupplierProfile
    company: CompanyInfo
    orders: list[OrderBundle] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_single_supplier(self) -> "MultiOrderExportData":
        for bundle in self.orders:
            if bundle.order.supplier_id and bundle.order.supplier_id != self.supplier.id:
                raise ValueError(
                    f"Order {bundle.order.order_number} belongs to supplier "
                    f"{bundle.order.supplier_id}, not {self.supplier.id}"
                )
        return self

    @property
    def order_numbers(self) -> list[str]:
        return [bundle.order.order_number for bundle in self.orders]

    @property
    def earliest_order_date(self) -> date:
        return min(bundle.order.order_date for bundle in self.orders)

    @property
    def latest_order_date(self) -> date:
        return max(bundle.order.order_date for bundle in self.orders)


# ===================
# REQUEST / RESULT
# ===================

class ExportRequest(BaseModel):
    """
    Export request body.

    Exactly one of order_id / order_ids must be set; that rule is checked
    by the service so it can answer with a 400 naming the problem.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    order_id: Optional[str] = Field(None, alias="orderId")
    order_ids: Optional[list[str]] = Field(None, alias="orderIds")
    template_type: Optional[str] = Field(None, alias="templateType")


class ExporterIdentity(BaseSchema):
    """Authenticated caller."""

    user_id: str
    email: Optional[str] = None
    role: str


class ExportResult(BaseModel):
    """A finished export, ready to be returned."""

    filename: str
    content: bytes
    template_type: str
    export_type: str
    order_ids: list[str]


class ExportHistoryRecord(BaseSchema):
    """One row of the append-only export ledger."""

    order_id: str
    export_type: str
    exported_by: str
    file_name: str
    exported_at: Optional[datetime] = None


class SupplierGroup(BaseSchema):
    """Orders of one supplier inside a requested batch."""

    supplier_id: str
    supplier_name: str
    order_ids: list[str]
    order_count: int


class TemplateInfo(BaseSchema):
    """Template identifier with its display name."""

    template_type: str
    name: str
    has_logo: bool


# ===================
# LOGO
# ===================

@dataclass(frozen=True)
class LogoAsset:
    """Logo image bytes plus the size it should be drawn at (pixels)."""

    buffer: bytes
    extension: Literal["png", "jpeg"]
    width: int
    height: int
