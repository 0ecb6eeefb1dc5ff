"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    BadRequestError,
    AuthenticationError,
    PermissionDeniedError,
    DatabaseError,

    # Export request
    MissingOrderIdError,
    AmbiguousExportRequestError,
    BatchTooLargeError,

    # Order data
    OrderNotFoundError,
    OrderSupplierMissingError,
    OrderHasNoPartsError,
    MixedSupplierBatchError,

    # Workbook
    ExportGenerationError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "BadRequestError",
    "AuthenticationError",
    "PermissionDeniedError",
    "DatabaseError",

    # Export request
    "MissingOrderIdError",
    "AmbiguousExportRequestError",
    "BatchTooLargeError",

    # Order data
    "OrderNotFoundError",
    "OrderSupplierMissingError",
    "OrderHasNoPartsError",
    "MixedSupplierBatchError",

    # Workbook
    "ExportGenerationError",
]
