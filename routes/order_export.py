"""
Order export API routes.

POST /api/order-export returns the purchase-order request workbook for
one order or a same-supplier batch.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from exceptions import AppError
from models.order_export import ExporterIdentity, ExportHistoryRecord, ExportRequest, TemplateInfo
from services.auth_service import require_exporter
from services.export_history_service import get_export_history_service
from services.logo_service import LogoCache, has_logo_support
from services.order_export_service import get_order_export_service
from templates.factory import get_template_name, list_templates

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/order-export", tags=["Order Export"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ===================
# EXCEPTION HANDLER
# ===================


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        },
    )


def get_logo_cache(request: Request) -> Optional[LogoCache]:
    return getattr(request.app.state, "logo_cache", None)


# ===================
# ROUTES
# ===================


@router.post("")
def export_orders(
    body: ExportRequest,
    request: Request,
    exporter: ExporterIdentity = Depends(require_exporter),
):
    """
    Export one order (`orderId`) or a batch (`orderIds`) as XLSX.

    Raises:
        400: Bad request, missing supplier/parts, mixed-supplier batch
        401: Missing or invalid token
        403: Role may not export
        404: Order not found
    """
    try:
        service = get_order_export_service()
        result = service.export(body, exporter, logo_cache=get_logo_cache(request))

        return Response(
            content=result.content,
            media_type=XLSX_MEDIA_TYPE,
            headers={
                "Content-Disposition": f'attachment; filename="{result.filename}"',
                "X-Export-Template": result.template_type,
            },
        )

    except Exception as e:
        return handle_error(e)


@router.get("/templates", response_model=list[TemplateInfo])
def get_templates(exporter: ExporterIdentity = Depends(require_exporter)):
    """Known template identifiers with display names."""
    return [
        TemplateInfo(
            template_type=kind.value,
            name=get_template_name(kind.value),
            has_logo=has_logo_support(kind.value),
        )
        for kind in list_templates()
    ]


@router.get("/history/{order_id}", response_model=list[ExportHistoryRecord])
def get_export_history(
    order_id: str,
    limit: int = 20,
    exporter: ExporterIdentity = Depends(require_exporter),
):
    """Most recent exports of an order."""
    try:
        service = get_export_history_service()
        return service.get_for_order(order_id, limit=min(max(limit, 1), 100))

    except Exception as e:
        return handle_error(e)
