"""
Order export service.

Turns an export request into a finished XLSX:

1. validate the request (one id, or a batch of up to N ids)
2. read each order with its supplier and line items in one query
3. check a batch belongs to a single supplier
4. pick the template and build the workbook
5. name the file and record the export in the history ledger
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from config import get_supabase_client, settings
from exceptions import (
    AmbiguousExportRequestError,
    BadRequestError,
    BatchTooLargeError,
    DatabaseError,
    MissingOrderIdError,
    MixedSupplierBatchError,
    OrderHasNoPartsError,
    OrderNotFoundError,
    OrderSupplierMissingError,
)
from models.order_export import (
    CompanyInfo,
    ExporterIdentity,
    ExportRequest,
    ExportResult,
    MultiOrderExportData,
    OrderBundle,
    OrderExportData,
    OrderInfo,
    PartLineItem,
    SupplierGroup,
    SupplierProfile,
)
from services.export_history_service import ExportHistoryService, export_type_for, get_export_history_service
from services.logo_service import LogoCache
from services.workbook_service import WorkbookService, get_workbook_service
from templates.factory import resolve_template_type
from utils.export_format import generate_export_filename

logger = structlog.get_logger(__name__)


ORDER_EXPORT_SELECT = """
    id,
    order_number,
    order_date,
    expected_delivery,
    notes,
    priority,
    status,
    supplier_id,
    supplier:suppliers(
        id,
        name,
        contact_person,
        email,
        phone,
        address,
        payment_terms,
        logo_url,
        export_template_type,
        template_config
    ),
    order_parts(
        id,
        quantity,
        unit_price,
        part:parts(
            id,
            part_number,
            name,
            description,
            specifications
        )
    )
"""


# ===================
# BATCH CHECKS
# ===================

def group_orders_by_supplier(
    orders: list[tuple[OrderBundle, SupplierProfile]],
) -> list[SupplierGroup]:
    """Group assembled orders by supplier, in first-seen order."""
    groups: dict[str, SupplierGroup] = {}
    for bundle, supplier in orders:
        group = groups.get(supplier.id)
        if group is None:
            group = SupplierGroup(
                supplier_id=supplier.id,
                supplier_name=supplier.name,
                order_ids=[],
                order_count=0,
            )
            groups[supplier.id] = group
        group.order_ids.append(bundle.order.id)
        group.order_count += 1
    return list(groups.values())


def validate_single_supplier(
    orders: list[tuple[OrderBundle, SupplierProfile]],
) -> SupplierProfile:
    """
    Return the supplier shared by every order in the batch.

    Raises:
        MixedSupplierBatchError: Orders span more than one supplier
    """
    if not orders:
        raise MissingOrderIdError()

    groups = group_orders_by_supplier(orders)
    if len(groups) > 1:
        logger.info(
            "mixed_supplier_batch_rejected",
            supplier_count=len(groups),
            order_count=len(orders),
        )
        raise MixedSupplierBatchError([group.model_dump() for group in groups])

    return orders[0][1]


# ===================
# SERVICE
# ===================

class OrderExportService:
    """
    Order export business logic.

    Reads orders and suppliers, builds the workbook, records history.
    """

    def __init__(
        self,
        workbook_service: Optional[WorkbookService] = None,
        history_service: Optional[ExportHistoryService] = None,
    ):
        self.db = get_supabase_client()
        self.table = "orders"
        self.max_orders = settings.max_orders_per_export
        self.fetch_workers = settings.export_fetch_workers
        self.workbook_service = workbook_service or get_workbook_service()
        self.history_service = history_service or get_export_history_service()

    # ===================
    # REQUEST VALIDATION
    # ===================

    def validate_export_request(self, request: ExportRequest) -> list[str]:
        """
        Order ids to export, in request order.

        Raises:
            BadRequestError: No id, both forms, empty batch, or batch too large
        """
        order_id = (request.order_id or "").strip()
        has_batch = request.order_ids is not None

        if order_id and has_batch:
            raise AmbiguousExportRequestError()

        if order_id:
            return [order_id]

        if not has_batch:
            raise MissingOrderIdError()

        if len(request.order_ids) == 0:
            raise BadRequestError(
                code="EMPTY_ORDER_BATCH",
                message="orderIds must contain at least one order ID"
            )

        if len(request.order_ids) > self.max_orders:
            raise BatchTooLargeError(requested=len(request.order_ids), limit=self.max_orders)

        # Repeated ids would print the same lines twice
        order_ids = []
        for raw in request.order_ids:
            value = (raw or "").strip()
            if not value:
                raise MissingOrderIdError()
            if value not in order_ids:
                order_ids.append(value)
        return order_ids

    # ===================
    # READ OPERATIONS
    # ===================

    def fetch_order(self, order_id: str) -> tuple[OrderBundle, SupplierProfile]:
        """
        Read one order with its supplier and line items.

        Raises:
            OrderNotFoundError: No such order
            OrderSupplierMissingError: Order has no supplier
            OrderHasNoPartsError: Order has no line items
            DatabaseError: Query failed
        """
        logger.debug("fetching_order_for_export", order_id=order_id)

        try:
            result = (
                self.db.table(self.table)
                .select(ORDER_EXPORT_SELECT)
                .eq("id", order_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("order_export_fetch_failed", order_id=order_id, error=str(e))
            raise DatabaseError("select", "Could not read order", details={"order_id": order_id})

        if not result.data:
            raise OrderNotFoundError(order_id)

        row = result.data[0]

        if not row.get("supplier"):
            raise OrderSupplierMissingError(order_id)

        try:
            parts = self._to_line_items(order_id, row.get("order_parts") or [])
            supplier = SupplierProfile.model_validate(row["supplier"])
            order = OrderInfo.model_validate({
                **{k: v for k, v in row.items() if k not in ("supplier", "order_parts")},
                "supplier_id": row.get("supplier_id") or row["supplier"].get("id"),
            })
        except ValidationError as e:
            logger.error("order_export_row_invalid", order_id=order_id, error=str(e))
            raise DatabaseError("select", "Order record is incomplete", details={"order_id": order_id})

        if not parts:
            raise OrderHasNoPartsError(order_id)

        return OrderBundle(order=order, parts=parts), supplier

    def _to_line_items(self, order_id: str, order_parts: list[dict[str, Any]]) -> list[PartLineItem]:
        """Flatten order_parts + part into line items, keeping the stored order."""
        items = []
        for op in order_parts:
            part = op.get("part")
            if not part:
                logger.warning("order_part_missing_part", order_id=order_id, order_part_id=op.get("id"))
                continue
            items.append(PartLineItem(
                id=op["id"],
                part_number=part.get("part_number") or "",
                name=part.get("name") or "",
                description=part.get("description"),
                specifications=part.get("specifications"),
                quantity=op.get("quantity") or 0,
                unit_price=op.get("unit_price"),
            ))
        return items

    def fetch_order_export_data(self, order_id: str) -> OrderExportData:
        """Single-order export model."""
        bundle, supplier = self.fetch_order(order_id)
        return OrderExportData(
            order=bundle.order,
            supplier=supplier,
            company=self.get_company_info(),
            parts=bundle.parts,
        )

    def fetch_batch(self, order_ids: list[str]) -> list[tuple[OrderBundle, SupplierProfile]]:
        """
        Read several orders concurrently.

        Results come back in `order_ids` order. The first failing order
        fails the whole batch.
        """
        workers = max(1, min(self.fetch_workers, len(order_ids)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.fetch_order, order_ids))

    def fetch_multi_order_export_data(self, order_ids: list[str]) -> MultiOrderExportData:
        """
        Batch export model.

        Raises:
            MixedSupplierBatchError: Orders belong to different suppliers
        """
        orders = self.fetch_batch(order_ids)
        supplier = validate_single_supplier(orders)
        return MultiOrderExportData(
            supplier=supplier,
            company=self.get_company_info(),
            orders=[bundle for bundle, _ in orders],
        )

    def get_company_info(self) -> CompanyInfo:
        return CompanyInfo(
            name=settings.company_name,
            email=settings.company_email,
            phone=settings.company_phone,
            address=settings.company_address,
            purchaser=settings.default_purchaser,
        )

    # ===================
    # EXPORT
    # ===================

    def export(
        self,
        request: ExportRequest,
        exporter: ExporterIdentity,
        logo_cache: Optional[LogoCache] = None,
        export_date: Optional[date] = None,
    ) -> ExportResult:
        """
        Build the export for a request.

        A batch of one order is laid out like a single export.
        """
        order_ids = self.validate_export_request(request)
        multi = len(order_ids) > 1

        logger.info(
            "order_export_started",
            order_count=len(order_ids),
            multi=multi,
            user_id=exporter.user_id,
        )

        if multi:
            data = self.fetch_multi_order_export_data(order_ids)
            order_numbers = data.order_numbers
        else:
            data = self.fetch_order_export_data(order_ids[0])
            order_numbers = [data.order.order_number]

        template_type = resolve_template_type(
            data.supplier.export_template_type,
            request.template_type,
            settings.default_template_type,
        )

        content = self.workbook_service.build_workbook(
            data,
            template_type=template_type,
            multi=multi,
            logo_cache=logo_cache,
        )

        filename = generate_export_filename(
            data.supplier.name,
            order_numbers,
            export_date or date.today(),
        )
        export_type = export_type_for(template_type, multi)

        self.history_service.record_exports(
            order_ids=order_ids,
            export_type=export_type,
            exported_by=exporter.user_id,
            file_name=filename,
        )

        logger.info(
            "order_export_completed",
            filename=filename,
            template_type=template_type,
            order_count=len(order_ids),
            bytes=len(content),
        )

        return ExportResult(
            filename=filename,
            content=content,
            template_type=template_type,
            export_type=export_type,
            order_ids=order_ids,
        )


_service: Optional[OrderExportService] = None


def get_order_export_service() -> OrderExportService:
    global _service
    if _service is None:
        _service = OrderExportService()
    return _service
