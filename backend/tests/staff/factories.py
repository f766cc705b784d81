"""
Factories for staff app models.
"""

from typing import Any

import factory
from factory.django import DjangoModelFactory

from apps.staff.models import StaffRecord


class StaffRecordFactory(DjangoModelFactory[StaffRecord]):
    """Factory for StaffRecord model."""

    class Meta:
        model = StaffRecord

    organization: Any = factory.SubFactory("tests.accounts.factories.OrganizationFactory")
    cohort_year = "2024"
    registration_id = factory.Sequence(lambda n: f"TS/T/2024/{n + 1:03d}")
    identity_id = factory.Sequence(lambda n: f"user-test-staff-{n}")
    first_name: Any = factory.Faker("first_name")
    last_name: Any = factory.Faker("last_name")
    gender = None
    initials = None
