"""
Business logic services.

Each service handles one domain area.
"""

from services.logo_service import LogoCache, has_logo_support
from services.export_history_service import (
    ExportHistoryService,
    get_export_history_service,
    export_type_for,
)
from services.workbook_service import WorkbookService, get_workbook_service
from services.auth_service import AuthService, get_auth_service, require_exporter
from services.order_export_service import (
    OrderExportService,
    get_order_export_service,
    group_orders_by_supplier,
    validate_single_supplier,
)

__all__ = [
    "LogoCache",
    "has_logo_support",
    "ExportHistoryService",
    "get_export_history_service",
    "export_type_for",
    "WorkbookService",
    "get_workbook_service",
    "AuthService",
    "get_auth_service",
    "require_exporter",
    "OrderExportService",
    "get_order_export_service",
    "group_orders_by_supplier",
    "validate_single_supplier",
]
