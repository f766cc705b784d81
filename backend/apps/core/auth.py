"""
Authentication context for the request lifecycle.

The bearer auth class resolves the session token to a caller and attaches
this container as ``request.auth``; endpoints consume it.
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AuthContext:
    """
    Verified caller of a provisioning request.

    Attributes:
        identity_id: Identity store id of the caller
        role: Role from the caller's Profile
        organization_id: Organization the caller's Profile is linked to, or None
    """

    identity_id: str
    role: str
    organization_id: UUID | None = None

    @property
    def is_admin(self) -> bool:
        """Only ADMIN callers may provision staff."""
        from apps.accounts.constants import Role

        return self.role == Role.ADMIN

    def can_see_organization(self, organization_id: UUID) -> bool:
        """
        Check whether the caller may act within an organization.

        A caller whose Profile is not linked to any organization sees none.
        """
        return self.organization_id is not None and self.organization_id == organization_id
