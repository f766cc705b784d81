"""
Accounts models - role and organization membership.
"""

from django.db import models

from apps.accounts.constants import Role
from apps.core.models import TimestampedModel


class Profile(TimestampedModel):
    """
    Role and school membership bound one-to-one to an identity.

    The identity itself lives in the hosted identity store; identity_id is
    its store-assigned id. Email is a denormalized copy kept for display.
    """

    identity_id = models.CharField(
        max_length=255,
        unique=True,
        db_index=True,
        help_text="Identity store user id, e.g. 'user-live-xxx'",
    )
    email = models.EmailField()
    full_name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.TEACHER)

    # Null until the identity is linked to a school
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="profiles",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"

    @property
    def is_admin(self) -> bool:
        """Check if profile has the ADMIN role."""
        return self.role == Role.ADMIN
