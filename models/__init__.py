"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.order_export import (
    MAX_ORDERS_PER_EXPORT,
    BankInfo,
    TemplateConfig,
    SupplierProfile,
    CompanyInfo,
    OrderInfo,
    PartLineItem,
    OrderBundle,
    OrderExportData,
    MultiOrderExportData,
    ExportRequest,
    ExporterIdentity,
    ExportResult,
    ExportHistoryRecord,
    SupplierGroup,
    TemplateInfo,
    LogoAsset,
)

__all__ = [
    "BaseSchema",
    "MAX_ORDERS_PER_EXPORT",
    "BankInfo",
    "TemplateConfig",
    "SupplierProfile",
    "CompanyInfo",
    "OrderInfo",
    "PartLineItem",
    "OrderBundle",
    "OrderExportData",
    "MultiOrderExportData",
    "ExportRequest",
    "ExporterIdentity",
    "ExportResult",
    "ExportHistoryRecord",
    "SupplierGroup",
    "TemplateInfo",
    "LogoAsset",
]
