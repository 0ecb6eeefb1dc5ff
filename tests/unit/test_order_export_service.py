"""
Unit tests for OrderExportService.

Run: pytest tests/unit/test_order_export_service.py -v
"""

from datetime import date
from io import BytesIO
from unittest.mock import MagicMock

import pytest
from openpyxl import load_workbook

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
from models.order_export import ExportRequest
from services.order_export_service import (
    OrderExportService,
    group_orders_by_supplier,
    validate_single_supplier,
)
from services.workbook_service import WorkbookService
from tests.factories import OrderRowFactory, SupplierRowFactory

EXPORT_DATE = date(2025, 4, 1)


@pytest.fixture
def service(mock_db) -> OrderExportService:
    return OrderExportService()


def _two_orders_same_supplier(template_type=None) -> list[dict]:
    supplier = SupplierRowFactory.create(export_template_type=template_type)
    return [
        OrderRowFactory.create(id="order-1", order_number="ORD-001", supplier=supplier),
        OrderRowFactory.create(id="order-2", order_number="ORD-002", supplier=supplier, part_count=3),
    ]


class TestValidateExportRequest:
    """Tests for OrderExportService.validate_export_request()"""

    def test_single_id(self, service):
        assert service.validate_export_request(ExportRequest(orderId="order-1")) == ["order-1"]

    def test_batch_keeps_order_and_drops_repeats(self, service):
        request = ExportRequest(orderIds=["b", "a", "b"])
        assert service.validate_export_request(request) == ["b", "a"]

    def test_no_id(self, service):
        with pytest.raises(MissingOrderIdError) as exc_info:
            service.validate_export_request(ExportRequest())
        assert exc_info.value.message == "Order ID is required"
        assert exc_info.value.status_code == 400

    def test_both_forms_rejected(self, service):
        with pytest.raises(AmbiguousExportRequestError):
            service.validate_export_request(ExportRequest(orderId="a", orderIds=["b"]))

    def test_empty_batch_rejected(self, service):
        with pytest.raises(BadRequestError) as exc_info:
            service.validate_export_request(ExportRequest(orderIds=[]))
        assert exc_info.value.code == "EMPTY_ORDER_BATCH"

    def test_batch_limit(self, service):
        ids = [f"order-{i}" for i in range(11)]
        with pytest.raises(BatchTooLargeError) as exc_info:
            service.validate_export_request(ExportRequest(orderIds=ids))
        assert exc_info.value.message == "Maximum 10 orders per export"

    def test_batch_at_limit_accepted(self, service):
        ids = [f"order-{i}" for i in range(10)]
        assert len(service.validate_export_request(ExportRequest(orderIds=ids))) == 10


class TestFetchOrderExportData:
    """Tests for OrderExportService.fetch_order_export_data()"""

    def test_assembles_order_supplier_and_parts(self, service, mock_supabase):
        mock_supabase.set_table_data("orders", [OrderRowFactory.create(part_count=3)])

        data = service.fetch_order_export_data("order-1")

        assert data.order.order_number == "ORD-001"
        assert data.order.order_date == date(2025, 3, 7)
        assert data.supplier.name == "Acme Parts Co."
        assert len(data.parts) == 3
        assert data.company.name == "Your Company Name"

    def test_parts_keep_stored_order(self, service, mock_supabase):
        parts = [
            {"id": "op-b", "quantity": 1, "unit_price": None,
             "part": {"id": "p2", "part_number": "B", "name": "Second", "description": None, "specifications": None}},
            {"id": "op-a", "quantity": 4, "unit_price": 10,
             "part": {"id": "p1", "part_number": "A", "name": "First", "description": None, "specifications": {"k": "v"}}},
        ]
        mock_supabase.set_table_data("orders", [OrderRowFactory.create(order_parts=parts)])

        data = service.fetch_order_export_data("order-1")

        assert [p.part_number for p in data.parts] == ["B", "A"]
        assert data.parts[0].specifications == {}
        assert data.parts[1].quantity == 4

    def test_timestamp_order_date(self, service, mock_supabase):
        mock_supabase.set_table_data("orders", [OrderRowFactory.create(order_date="2025-03-07T09:30:00+00:00")])

        assert service.fetch_order_export_data("order-1").order.order_date == date(2025, 3, 7)

    def test_not_found(self, service, mock_supabase):
        mock_supabase.set_table_data("orders", [])

        with pytest.raises(OrderNotFoundError) as exc_info:
            service.fetch_order_export_data("missing")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Order not found"

    def test_no_supplier(self, service, mock_supabase):
        mock_supabase.set_table_data("orders", [OrderRowFactory.create(supplier=None)])

        with pytest.raises(OrderSupplierMissingError) as exc_info:
            service.fetch_order_export_data("order-1")
        assert exc_info.value.message == "Order has no supplier assigned"

    def test_no_parts(self, service, mock_supabase):
        mock_supabase.set_table_data("orders", [OrderRowFactory.create(order_parts=[])])

        with pytest.raises(OrderHasNoPartsError) as exc_info:
            service.fetch_order_export_data("order-1")
        assert exc_info.value.message == "Order has no parts"

    def test_database_failure(self, service, mock_supabase):
        mock_supabase.set_table_error("orders", Exception("connection reset"))

        with pytest.raises(DatabaseError) as exc_info:
            service.fetch_order_export_data("order-1")
        assert exc_info.value.status_code == 500


class TestSupplierGrouping:
    """Tests for validate_single_supplier() and group_orders_by_supplier()"""

    def test_mixed_suppliers_rejected_with_groups(self, service, mock_supabase):
        other = SupplierRowFactory.create(id="sup-2", name="Other Supplier")
        mock_supabase.set_table_data("orders", [
            OrderRowFactory.create(id="order-1"),
            OrderRowFactory.create(id="order-2", supplier=other),
            OrderRowFactory.create(id="order-3"),
        ])
        orders = service.fetch_batch(["order-1", "order-2", "order-3"])

        with pytest.raises(MixedSupplierBatchError) as exc_info:
            validate_single_supplier(orders)

        details = exc_info.value.details
        assert exc_info.value.status_code == 400
        assert details["multi_supplier"] is True
        assert [g["supplier_id"] for g in details["groups"]] == ["sup-1", "sup-2"]
        assert details["groups"][0]["order_ids"] == ["order-1", "order-3"]
        assert details["groups"][0]["order_count"] == 2

    def test_single_supplier_returned(self, service, mock_supabase):
        mock_supabase.set_table_data("orders", _two_orders_same_supplier())
        orders = service.fetch_batch(["order-1", "order-2"])

        assert validate_single_supplier(orders).id == "sup-1"
        assert len(group_orders_by_supplier(orders)) == 1

    def test_fetch_batch_keeps_request_order(self, service, mock_supabase):
        mock_supabase.set_table_data("orders", _two_orders_same_supplier())

        orders = service.fetch_batch(["order-2", "order-1"])

        assert [bundle.order.id for bundle, _ in orders] == ["order-2", "order-1"]

    def test_fetch_batch_fails_on_any_missing_order(self, service, mock_supabase):
        mock_supabase.set_table_data("orders", _two_orders_same_supplier())

        with pytest.raises(OrderNotFoundError):
            service.fetch_batch(["order-1", "missing"])


class TestExport:
    """Tests for OrderExportService.export()"""

    def test_single_export(self, service, mock_supabase, sample_exporter):
        mock_supabase.set_table_data("orders", [OrderRowFactory.create()])

        result = service.export(ExportRequest(orderId="order-1"), sample_exporter, export_date=EXPORT_DATE)

        assert result.filename == "PO_Request_Acme_Parts_Co__ORD_001_2025-04-01.xlsx"
        assert result.template_type == "generic"
        assert result.export_type == "generic_supplier_template"
        assert load_workbook(BytesIO(result.content)).sheetnames == ["Purchase Order Request"]

    def test_single_export_records_history(self, service, mock_supabase, sample_exporter):
        mock_supabase.set_table_data("orders", [OrderRowFactory.create()])

        result = service.export(ExportRequest(orderId="order-1"), sample_exporter, export_date=EXPORT_DATE)

        inserts = mock_supabase.inserted["order_export_history"]
        assert len(inserts) == 1
        assert inserts[0] == [{
            "order_id": "order-1",
            "export_type": "generic_supplier_template",
            "exported_by": "user-1",
            "file_name": result.filename,
        }]

    def test_batch_export_uses_supplier_template(self, service, mock_supabase, sample_exporter):
        mock_supabase.set_table_data("orders", _two_orders_same_supplier(template_type="hpi"))

        result = service.export(
            ExportRequest(orderIds=["order-1", "order-2"], templateType="generic"),
            sample_exporter,
            export_date=EXPORT_DATE,
        )

        assert result.template_type == "hpi"
        assert result.export_type == "hpi_supplier_template_batch"
        assert result.filename == "PO_Request_Acme_Parts_Co__ORD_001_ORD_002_2025-04-01.xlsx"
        assert load_workbook(BytesIO(result.content)).sheetnames == ["Combined PO Request"]

    def test_batch_history_one_row_per_order(self, service, mock_supabase, sample_exporter):
        mock_supabase.set_table_data("orders", _two_orders_same_supplier())

        service.export(ExportRequest(orderIds=["order-1", "order-2"]), sample_exporter)

        rows = mock_supabase.inserted["order_export_history"][0]
        assert [row["order_id"] for row in rows] == ["order-1", "order-2"]
        assert {row["export_type"] for row in rows} == {"generic_supplier_template_batch"}

    def test_batch_of_one_uses_single_layout(self, service, mock_supabase, sample_exporter):
        mock_supabase.set_table_data("orders", [OrderRowFactory.create()])

        result = service.export(ExportRequest(orderIds=["order-1"]), sample_exporter)

        assert result.export_type == "generic_supplier_template"
        assert load_workbook(BytesIO(result.content)).sheetnames == ["Purchase Order Request"]

    def test_requested_template_used_when_supplier_has_none(self, service, mock_supabase, sample_exporter):
        mock_supabase.set_table_data("orders", [OrderRowFactory.create()])

        result = service.export(ExportRequest(orderId="order-1", templateType=" HPI "), sample_exporter)

        assert result.template_type == "hpi"

    def test_mixed_batch_builds_no_workbook(self, mock_db, mock_supabase, sample_exporter):
        workbook_service = MagicMock(spec=WorkbookService)
        service = OrderExportService(workbook_service=workbook_service)
        other = SupplierRowFactory.create(id="sup-2", name="Other Supplier")
        mock_supabase.set_table_data("orders", [
            OrderRowFactory.create(id="order-1"),
            OrderRowFactory.create(id="order-2", supplier=other),
        ])

        with pytest.raises(MixedSupplierBatchError):
            service.export(ExportRequest(orderIds=["order-1", "order-2"]), sample_exporter)

        workbook_service.build_workbook.assert_not_called()
        assert "order_export_history" not in mock_supabase.inserted

    def test_history_failure_does_not_fail_export(self, service, mock_supabase, sample_exporter):
        mock_supabase.set_table_data("orders", [OrderRowFactory.create()])
        mock_supabase.set_table_error("order_export_history", Exception("permission denied"))

        result = service.export(ExportRequest(orderId="order-1"), sample_exporter)

        assert result.content
