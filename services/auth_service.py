"""
Caller authentication for the export endpoints.

The bearer token is a Supabase Auth access token. It is verified with
the service-role client, then the caller's role is read from
user_profiles and checked against the roles allowed to export.
"""

from typing import Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import get_admin_client, get_supabase_client, settings
from exceptions import AuthenticationError, PermissionDeniedError
from models.order_export import ExporterIdentity

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


class AuthService:
    def __init__(self, allowed_roles: Optional[list[str]] = None):
        self.db = get_admin_client() or get_supabase_client()
        self.allowed_roles = set(allowed_roles or settings.allowed_export_roles)

    def authenticate(self, token: Optional[str]) -> ExporterIdentity:
        """
        Resolve a bearer token to an exporter.

        Raises:
            AuthenticationError: No token, or the token was rejected
            PermissionDeniedError: No profile, or role not allowed to export
        """
        if not token:
            raise AuthenticationError()

        try:
            response = self.db.auth.get_user(token)
            user = response.user if response else None
        except Exception as e:
            logger.info("token_rejected", error_type=type(e).__name__)
            user = None

        if user is None:
            raise AuthenticationError("Invalid token")

        role = self._get_role(user.id)
        if role not in self.allowed_roles:
            logger.warning("export_permission_denied", user_id=user.id, role=role)
            raise PermissionDeniedError()

        return ExporterIdentity(user_id=user.id, email=getattr(user, "email", None), role=role)

    def _get_role(self, user_id: str) -> Optional[str]:
        try:
            result = (
                self.db.table("user_profiles")
                .select("role")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("user_profile_lookup_failed", user_id=user_id, error=str(e))
            return None

        if not result.data:
            return None
        return result.data[0].get("role")


_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    global _service
    if _service is None:
        _service = AuthService()
    return _service


def require_exporter(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> ExporterIdentity:
    """FastAPI dependency: the authenticated exporter, or 401/403."""
    token = credentials.credentials if credentials else None
    return get_auth_service().authenticate(token)
