"""
Organizations models - schools (tenants).
"""

import uuid

from django.db import models

from apps.core.models import TimestampedModel
from apps.organizations.abbreviations import derive_abbreviation


class Organization(TimestampedModel):
    """
    A school.

    Managed by the school settings screens; provisioning only reads it.
    The id is opaque to clients and travels as ``organization_id``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    @property
    def abbreviation(self) -> str:
        """Short code used in registration ids, derived from the name."""
        return derive_abbreviation(self.name)
