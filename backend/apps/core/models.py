"""
Core models - shared base classes.
"""

from django.db import models


class TimestampedModel(models.Model):
    """
    Abstract base model with created_at/updated_at timestamps.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class TenantScopedModel(TimestampedModel):
    """
    Abstract base model for records owned by one organization (school).

    Organizations are never deleted out from under their records, so the
    foreign key protects rather than cascades.

    Usage:
        class StaffRecord(TenantScopedModel):
            registration_id = models.CharField(max_length=64, unique=True)
    """

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        related_name="%(class)s_set",
    )

    class Meta:
        abstract = True
