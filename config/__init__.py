"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    get_supabase_client: Cached Supabase client
    get_admin_client: Service-role client (auth + storage)
    check_connection: Health check function
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    get_supabase_client,
    get_admin_client,
    check_connection,
    DatabaseError,
    ConnectionError
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Database
    "get_supabase_client",
    "get_admin_client",
    "check_connection",
    "DatabaseError",
    "ConnectionError",
]
