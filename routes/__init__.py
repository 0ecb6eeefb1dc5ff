"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.order_export import router as order_export_router

__all__ = [
    "order_export_router",
]
