"""
Custom exception classes for the application.

Every error body carries a plain-string "error" so callers can show it
as-is; "code" and "details" are there for programmatic handling.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "ORDER_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class BadRequestError(AppError):
    """Request rejected before any work was done (400)."""

    def __init__(
        self,
        message: str,
        code: str = "BAD_REQUEST",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details=details
        )


class AuthenticationError(AppError):
    """Missing or invalid credential (401)."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401
        )


class PermissionDeniedError(AppError):
    """Authenticated, but the role may not do this (403)."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# EXPORT REQUEST ERRORS
# ===================

class MissingOrderIdError(BadRequestError):
    """Neither orderId nor orderIds supplied."""

    def __init__(self):
        super().__init__(
            code="ORDER_ID_REQUIRED",
            message="Order ID is required"
        )


class AmbiguousExportRequestError(BadRequestError):
    """Both orderId and orderIds supplied."""

    def __init__(self):
        super().__init__(
            code="AMBIGUOUS_EXPORT_REQUEST",
            message="Provide either orderId or orderIds, not both"
        )


class BatchTooLargeError(BadRequestError):
    """Batch exceeds the per-export order limit."""

    def __init__(self, requested: int, limit: int):
        super().__init__(
            code="BATCH_TOO_LARGE",
            message=f"Maximum {limit} orders per export",
            details={"requested": requested, "limit": limit}
        )


# ===================
# ORDER DATA ERRORS
# ===================

class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: str):
        super().__init__(
            resource="Order",
            identifier=order_id,
            code="ORDER_NOT_FOUND"
        )


class OrderSupplierMissingError(BadRequestError):
    """Order has no supplier relation."""

    def __init__(self, order_id: str):
        super().__init__(
            code="ORDER_SUPPLIER_MISSING",
            message="Order has no supplier assigned",
            details={"order_id": order_id}
        )


class OrderHasNoPartsError(BadRequestError):
    """Order has an empty line-item collection."""

    def __init__(self, order_id: str):
        super().__init__(
            code="ORDER_HAS_NO_PARTS",
            message="Order has no parts",
            details={"order_id": order_id}
        )


class MixedSupplierBatchError(BadRequestError):
    """Batch spans more than one supplier."""

    def __init__(self, groups: list[dict]):
        names = ", ".join(g["supplier_name"] for g in groups)
        super().__init__(
            code="MIXED_SUPPLIER_BATCH",
            message=f"All orders in one export must belong to the same supplier (found: {names})",
            details={"multi_supplier": True, "groups": groups}
        )


# ===================
# WORKBOOK ERRORS
# ===================

class ExportGenerationError(AppError):
    """Workbook layout or serialization failed (500)."""

    def __init__(self, details: Optional[dict] = None):
        super().__init__(
            code="EXPORT_GENERATION_FAILED",
            message="Failed to generate export file",
            status_code=500,
            details=details
        )
