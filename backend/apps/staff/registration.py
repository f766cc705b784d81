"""
Registration id allocation.

Registration ids look like ``GPA/T/2024/007``: the school abbreviation, a
fixed ``T`` for teacher, the cohort year and a zero-padded sequence number.

There is no counter table. The candidate sequence comes from counting the
school's records for the year, and the insert itself is the reservation:
if another request took the same id first, the unique constraint rejects
ours and the next sequence number is tried, up to MAX_ALLOCATION_ATTEMPTS.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import DatabaseError, IntegrityError, transaction

from apps.core.logging import get_logger
from apps.staff.exceptions import AllocationExhausted, StoreInsertError
from apps.staff.models import StaffRecord

if TYPE_CHECKING:
    from apps.core.context import ServiceContext
    from apps.organizations.models import Organization

logger = get_logger(__name__)

MAX_ALLOCATION_ATTEMPTS = 5
SEQUENCE_WIDTH = 3
STAFF_TYPE_CODE = "T"
DUPLICATE_KEY_SQLSTATE = "23505"

T = TypeVar("T")


@dataclass(frozen=True)
class Allocation(Generic[T]):
    """A registration id that was successfully inserted."""

    registration_id: str
    result: T
    attempts: int


def format_registration_id(abbreviation: str, cohort_year: str, sequence: int) -> str:
    return f"{abbreviation}/{STAFF_TYPE_CODE}/{cohort_year}/{sequence:0{SEQUENCE_WIDTH}d}"


def is_duplicate_key_error(error: Exception) -> bool:
    """
    Check whether an insert failed on a unique constraint.

    Prefers the driver's SQLSTATE (psycopg2 ``pgcode``, psycopg ``sqlstate``)
    and falls back to the message for drivers that expose neither.
    """
    cause = error.__cause__
    sqlstate = getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)
    if sqlstate:
        return sqlstate == DUPLICATE_KEY_SQLSTATE
    message = str(error).lower()
    return "duplicate" in message or "unique constraint" in message


def count_existing(ctx: "ServiceContext", organization: "Organization", cohort_year: str) -> int:
    """Number of staff records already issued for the school and year."""
    return (
        StaffRecord.objects.using(ctx.db_alias)
        .filter(organization=organization, cohort_year=cohort_year)
        .count()
    )


def allocate_registration_id(
    ctx: "ServiceContext",
    organization: "Organization",
    cohort_year: str,
    insert: Callable[[str], T],
) -> Allocation[T]:
    """
    Insert a record under the next free registration id.

    The existing records are counted once; ``insert`` then receives each
    candidate id in turn and must perform the write. A duplicate-key
    IntegrityError moves on to the next sequence number, one step at a time.
    Each attempt runs in its own savepoint so a rejected insert does not
    poison the surrounding transaction.

    Raises:
        StoreInsertError: The count or an insert failed for any other reason (not retried)
        AllocationExhausted: Every attempt collided
    """
    abbreviation = organization.abbreviation
    try:
        existing = count_existing(ctx, organization, cohort_year)
    except DatabaseError as e:
        raise StoreInsertError(str(e)) from e

    for attempt in range(MAX_ALLOCATION_ATTEMPTS):
        sequence = existing + 1 + attempt
        registration_id = format_registration_id(abbreviation, cohort_year, sequence)
        try:
            with transaction.atomic(using=ctx.db_alias):
                result = insert(registration_id)
        except IntegrityError as e:
            if not is_duplicate_key_error(e):
                raise StoreInsertError(str(e)) from e
            logger.info(
                "registration_id_collision",
                registration_id=registration_id,
                attempt=attempt + 1,
            )
            continue
        except DatabaseError as e:
            raise StoreInsertError(str(e)) from e

        return Allocation(registration_id=registration_id, result=result, attempts=attempt + 1)

    logger.warning(
        "registration_id_allocation_exhausted",
        organization_id=str(organization.pk),
        cohort_year=cohort_year,
        attempts=MAX_ALLOCATION_ATTEMPTS,
    )
    raise AllocationExhausted(
        "Failed to generate unique registration id.",
        attempts=MAX_ALLOCATION_ATTEMPTS,
    )
