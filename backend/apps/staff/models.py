"""
Staff models - teacher enrollment records.
"""

from django.db import models

from apps.core.models import TenantScopedModel


class StaffRecord(TenantScopedModel):
    """
    A teacher's enrollment at a school.

    registration_id is allocated once at insert time and never changes.
    Its uniqueness constraint is what arbitrates concurrent allocations.
    """

    registration_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="Human-readable code, e.g. 'GPA/T/2024/001'",
    )
    identity_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Identity store user id of the teacher",
    )
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    gender = models.CharField(max_length=20, null=True, blank=True)
    cohort_year = models.CharField(max_length=4, help_text="Year of entry, e.g. '2024'")
    initials = models.CharField(max_length=4, null=True, blank=True)

    class Meta:
        ordering = ["registration_id"]
        indexes = [
            models.Index(fields=["organization", "cohort_year"], name="staff_org_cohort_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.registration_id} {self.first_name} {self.last_name}"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
