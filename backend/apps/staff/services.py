"""
Staff services - staff record creation.
"""

from typing import TYPE_CHECKING

from apps.core.logging import get_logger
from apps.staff.models import StaffRecord
from apps.staff.registration import allocate_registration_id

if TYPE_CHECKING:
    from apps.core.context import ServiceContext
    from apps.organizations.models import Organization

logger = get_logger(__name__)


def compute_initials(first_name: str, last_name: str) -> str | None:
    """First letters of first and last name, uppercased; None if both are empty."""
    return f"{first_name[:1]}{last_name[:1]}".upper() or None


def create_staff_record(
    ctx: "ServiceContext",
    organization: "Organization",
    cohort_year: str,
    identity_id: str,
    first_name: str,
    last_name: str,
    gender: str | None = None,
) -> StaffRecord:
    """
    Create a teacher's staff record with a freshly allocated registration id.

    Raises:
        StoreInsertError: Insert failed for a reason other than a duplicate id
        AllocationExhausted: No free registration id within the attempt bound
    """
    initials = compute_initials(first_name, last_name)

    def insert(registration_id: str) -> StaffRecord:
        return StaffRecord.objects.using(ctx.db_alias).create(
            registration_id=registration_id,
            identity_id=identity_id,
            first_name=first_name,
            last_name=last_name,
            gender=gender,
            cohort_year=cohort_year,
            organization=organization,
            initials=initials,
        )

    allocation = allocate_registration_id(ctx, organization, cohort_year, insert)

    logger.info(
        "staff_record_created",
        registration_id=allocation.registration_id,
        identity_id=identity_id,
        attempts=allocation.attempts,
    )
    return allocation.result
