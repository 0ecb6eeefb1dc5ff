"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (token verification, storage)"
    )

    # ===================
    # EXPORT LIMITS
    # ===================
    max_orders_per_export: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum order ids accepted in one batch export"
    )
    export_fetch_workers: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Threads used to fetch batch orders concurrently"
    )
    allowed_export_roles: list[str] = Field(
        default=["admin", "manager", "buyer"],
        description="Profile roles allowed to export orders"
    )

    # ===================
    # TEMPLATES
    # ===================
    default_template_type: str = Field(
        default="generic",
        description="Template used when neither supplier nor caller picks one"
    )
    logo_bucket: str = Field(
        default="company-assets",
        description="Supabase Storage bucket holding template logos"
    )
    default_purchaser: str = Field(
        default="ALBERT HO -san",
        description="Purchaser name printed on supplier-specific templates"
    )

    # ===================
    # ISSUING COMPANY
    # ===================
    company_name: str = Field(
        default="Your Company Name",
        description="Company name printed in the issuer block"
    )
    company_email: Optional[str] = Field(None, description="Issuer email")
    company_phone: Optional[str] = Field(None, description="Issuer phone")
    company_address: Optional[str] = Field(None, description="Issuer address")

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="Origins allowed to call the API from a browser"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def service_key_configured(self) -> bool:
        return bool(self.supabase_service_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
