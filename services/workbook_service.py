"""
Workbook assembly for order exports.

Creates the workbook, hands the sheet to the selected template and
serialises the result to XLSX bytes.
"""

from io import BytesIO
from typing import Optional, Union

import structlog
from openpyxl import Workbook

from exceptions import ExportGenerationError
from models.order_export import MultiOrderExportData, OrderExportData
from services.logo_service import LogoCache
from templates.factory import get_template_function, get_template_kind

logger = structlog.get_logger(__name__)

SINGLE_SHEET_TITLE = "Purchase Order Request"
MULTI_SHEET_TITLE = "Combined PO Request"
TAB_COLOR = "0066CC"
CREATOR = "Parts Management System"


class WorkbookService:
    """Builds export workbooks."""

    def build_workbook(
        self,
        data: Union[OrderExportData, MultiOrderExportData],
        template_type: str,
        multi: bool = False,
        logo_cache: Optional[LogoCache] = None,
    ) -> bytes:
        """
        Lay out `data` with the template for `template_type`.

        Args:
            data: OrderExportData, or MultiOrderExportData when multi
            template_type: Resolved template identifier
            multi: Use the multi-order layout
            logo_cache: Source of the template logo; None draws a placeholder

        Returns:
            XLSX file contents

        Raises:
            ExportGenerationError: Layout or serialisation failed
        """
        kind = get_template_kind(template_type)
        apply_template = get_template_function(template_type, multi)

        try:
            wb = Workbook()
            wb.properties.creator = CREATOR

            ws = wb.active
            ws.title = MULTI_SHEET_TITLE if multi else SINGLE_SHEET_TITLE
            ws.sheet_properties.tabColor = TAB_COLOR

            logo = logo_cache.load(kind.value) if logo_cache else None

            layout = apply_template(
                ws,
                data,
                config=data.supplier.template_config,
                logo=logo,
            )

            # Save to BytesIO
            output = BytesIO()
            wb.save(output)
            content = output.getvalue()

        except Exception as e:
            logger.error(
                "workbook_generation_failed",
                template_type=template_type,
                multi=multi,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ExportGenerationError(details={"template_type": template_type})

        logger.info(
            "workbook_generated",
            template_type=template_type,
            multi=multi,
            items=layout.item_count,
            has_logo=logo is not None,
            bytes=len(content),
        )
        return content


_service: Optional[WorkbookService] = None


def get_workbook_service() -> WorkbookService:
    global _service
    if _service is None:
        _service = WorkbookService()
    return _service
