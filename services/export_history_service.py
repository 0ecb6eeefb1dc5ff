"""
Append-only ledger of order exports.

Writing the ledger is best-effort: a failed insert is logged and the
export still goes out.
"""
import structlog
from typing import Optional

from config import get_supabase_client

logger = structlog.get_logger(__name__)


def export_type_for(template_type: str, multi: bool) -> str:
    """'hpi', True -> 'hpi_supplier_template_batch'"""
    suffix = "_batch" if multi else ""
    return f"{template_type}_supplier_template{suffix}"


class ExportHistoryService:
    def __init__(self):
        self.db = get_supabase_client()
        self.table = "order_export_history"

    def record_exports(
        self,
        order_ids: list[str],
        export_type: str,
        exported_by: str,
        file_name: str,
    ) -> bool:
        """One row per exported order, written in a single insert. Returns False on failure."""
        rows = [
            {
                "order_id": order_id,
                "export_type": export_type,
                "exported_by": exported_by,
                "file_name": file_name,
            }
            for order_id in order_ids
        ]
        if not rows:
            return True

        try:
            self.db.table(self.table).insert(rows).execute()
            logger.info(
                "export_history_recorded",
                order_count=len(rows),
                export_type=export_type,
                file_name=file_name,
            )
            return True
        except Exception as e:
            # Never let the audit trail break a finished export
            logger.warning(
                "export_history_write_failed",
                order_ids=order_ids,
                export_type=export_type,
                error=str(e),
            )
            return False

    def get_for_order(self, order_id: str, limit: int = 20) -> list[dict]:
        """Most recent exports of one order."""
        result = (
            self.db.table(self.table)
            .select("order_id, export_type, exported_by, file_name, exported_at")
            .eq("order_id", order_id)
            .order("exported_at", desc=True)
            .limit(limit)
            .execute()
        )
        return result.data or []


_service: Optional[ExportHistoryService] = None


def get_export_history_service() -> ExportHistoryService:
    global _service
    if _service is None:
        _service = ExportHistoryService()
    return _service
