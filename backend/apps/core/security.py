"""
Core security - authentication classes for API.
"""

from django.http import HttpRequest
from ninja.security import HttpBearer

from apps.accounts.exceptions import IdentityStoreError
from apps.accounts.identity_store import get_identity_store
from apps.accounts.models import Profile
from apps.core.auth import AuthContext
from apps.core.logging import bind_contextvars, get_logger

logger = get_logger(__name__)


class BearerAuth(HttpBearer):
    """
    Bearer session authentication for API endpoints.

    The session token is validated against the identity store and the
    caller's role and organization are read from their local Profile.
    A caller without a Profile is not authenticated.
    """

    def authenticate(self, request: HttpRequest, token: str) -> AuthContext | None:
        if not token:
            return None

        try:
            identity_id = get_identity_store().authenticate_session(token)
        except IdentityStoreError as e:
            logger.warning("session_authentication_failed", error=str(e))
            return None

        if not identity_id:
            return None

        profile = Profile.objects.filter(identity_id=identity_id).first()
        if profile is None:
            logger.warning("session_without_profile", identity_id=identity_id)
            return None

        bind_contextvars(**{"usr.id": identity_id})
        return AuthContext(
            identity_id=identity_id,
            role=profile.role,
            organization_id=profile.organization_id,
        )
