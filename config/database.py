"""
Database connection management.

Provides Supabase client singletons for database, auth and storage access.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class DatabaseError(Exception):
    """Base exception for database errors."""
    pass


class ConnectionError(DatabaseError):
    """Failed to connect to database."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        ConnectionError: If connection fails
    """
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_service_key or settings.supabase_key
        )

        logger.info(
            "supabase_connected",
            status="success",
            service_role=settings.service_key_configured
        )

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e


@lru_cache()
def get_admin_client() -> Optional[Client]:
    """
    Get Supabase client with service role key (admin access).

    Needed to verify user access tokens and to read private storage
    buckets. Only available if SUPABASE_SERVICE_KEY is configured.

    Returns:
        Client: Admin Supabase client, or None if not configured
    """
    if not settings.supabase_service_key:
        logger.warning("admin_client_not_configured")
        return None

    try:
        return create_client(
            settings.supabase_url,
            settings.supabase_service_key
        )
    except Exception as e:
        logger.error(
            "admin_client_failed",
            error=str(e)
        )
        return None




# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check database connection health.

    Returns:
        dict: Connection status with details
    """
    try:
        client = get_supabase_client()

        orders = client.table("orders").select("id", count="exact").limit(1).execute()
        suppliers = client.table("suppliers").select("id", count="exact").limit(1).execute()

        return {
            "status": "healthy",
            "orders_count": orders.count,
            "suppliers_count": suppliers.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
