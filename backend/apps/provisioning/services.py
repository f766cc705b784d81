"""
Provisioning services - the teacher provisioning saga.

A teacher is provisioned across two stores with no shared transaction:

    VALIDATING -> RESOLVING_IDENTITY -> LOADING_ORGANIZATION
        -> SYNCING_PROFILE -> ALLOCATING_AND_INSERTING -> DONE

Any failure moves the saga to ABORTED and is reported on the outcome.
Completed steps are not rolled back. Identity resolution and profile sync
are idempotent, so the caller can simply run the whole saga again; the
staff-record insert is the only non-idempotent step and it is guarded by
the registration id's unique constraint.
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import DatabaseError

from apps.accounts.constants import MIN_PASSWORD_LENGTH, Role
from apps.accounts.exceptions import IdentityError, ProfileWriteError
from apps.accounts.services import normalize_email, resolve_identity, sync_profile
from apps.core.logging import get_logger
from apps.organizations.models import Organization
from apps.provisioning.exceptions import (
    OrganizationLoadError,
    OrganizationNotFound,
    ProvisioningError,
    RequestValidationError,
)
from apps.staff.exceptions import StaffRecordError
from apps.staff.services import create_staff_record

if TYPE_CHECKING:
    from apps.core.auth import AuthContext
    from apps.core.context import ServiceContext

logger = get_logger(__name__)

COHORT_YEAR_PATTERN = re.compile(r"[0-9]{4}")

# Failures the saga translates into an ABORTED outcome. Anything else is a bug
# and propagates.
SAGA_FAILURES = (ProvisioningError, IdentityError, StaffRecordError)


class SagaState(StrEnum):
    VALIDATING = "VALIDATING"
    RESOLVING_IDENTITY = "RESOLVING_IDENTITY"
    LOADING_ORGANIZATION = "LOADING_ORGANIZATION"
    SYNCING_PROFILE = "SYNCING_PROFILE"
    ALLOCATING_AND_INSERTING = "ALLOCATING_AND_INSERTING"
    DONE = "DONE"
    ABORTED = "ABORTED"


@dataclass
class TeacherProvisioningRequest:
    """Raw provisioning input, exactly as received."""

    email: str | None = None
    password: str | None = None
    role: str | None = None
    organization_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    gender: str | None = None
    cohort_year: str | None = None


@dataclass
class TeacherUserRequest:
    """Raw input for creating an identity and profile without a staff record."""

    email: str | None = None
    password: str | None = None
    role: str | None = None
    organization_id: str | None = None


@dataclass(frozen=True)
class ValidTeacherRequest:
    email: str
    password: str
    role: Role
    organization_id: UUID
    first_name: str
    last_name: str
    gender: str | None
    cohort_year: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class ValidTeacherUserRequest:
    email: str
    password: str
    role: Role
    organization_id: UUID


@dataclass
class ProvisioningOutcome:
    """
    Result of a saga run.

    identity_id is set as soon as the identity is resolved, so a run that
    aborts later still reports which identity it touched.
    """

    state: SagaState
    identity_id: str | None = None
    identity_created: bool = False
    registration_id: str | None = None
    error: Exception | None = None
    failed_state: SagaState | None = None

    @property
    def ok(self) -> bool:
        return self.state == SagaState.DONE

    @property
    def message(self) -> str | None:
        return str(self.error) if self.error is not None else None


# --- Validation ---


def _clean(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


def _validated_email(raw: str | None) -> str:
    email = normalize_email(_clean(raw))
    if not email:
        raise RequestValidationError("email is required")
    try:
        validate_email(email)
    except DjangoValidationError:
        raise RequestValidationError("email is not a valid email address") from None
    return email


def _validated_password(raw: str | None) -> str:
    password = raw if isinstance(raw, str) else ""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise RequestValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    return password


def _validated_role(raw: str | None, default: Role | None = None) -> Role:
    value = _clean(raw).upper()
    if not value:
        if default is None:
            raise RequestValidationError("role is required")
        return default
    try:
        return Role(value)
    except ValueError:
        raise RequestValidationError(f"role must be one of {', '.join(Role.values)}") from None


def _validated_organization_id(raw: str | None) -> UUID:
    value = _clean(raw)
    if not value:
        raise RequestValidationError("organization_id is required")
    try:
        return UUID(value)
    except ValueError:
        raise RequestValidationError("organization_id is not a valid id") from None


def validate_teacher_request(request: TeacherProvisioningRequest) -> ValidTeacherRequest:
    """
    Check every field of a provisioning request.

    Raises:
        RequestValidationError: On the first missing or malformed field
    """
    email = _validated_email(request.email)
    password = _validated_password(request.password)
    role = _validated_role(request.role)
    organization_id = _validated_organization_id(request.organization_id)

    first_name = _clean(request.first_name)
    last_name = _clean(request.last_name)
    if not first_name or not last_name:
        raise RequestValidationError("first_name and last_name are required")

    cohort_year = _clean(request.cohort_year)
    if not COHORT_YEAR_PATTERN.fullmatch(cohort_year):
        raise RequestValidationError("cohort_year must be a 4-digit year")

    return ValidTeacherRequest(
        email=email,
        password=password,
        role=role,
        organization_id=organization_id,
        first_name=first_name,
        last_name=last_name,
        gender=_clean(request.gender) or None,
        cohort_year=cohort_year,
    )


def validate_teacher_user_request(request: TeacherUserRequest) -> ValidTeacherUserRequest:
    """Like validate_teacher_request, for the identity-only variant. Role defaults to TEACHER."""
    return ValidTeacherUserRequest(
        email=_validated_email(request.email),
        password=_validated_password(request.password),
        role=_validated_role(request.role, default=Role.TEACHER),
        organization_id=_validated_organization_id(request.organization_id),
    )


# --- Sagas ---


class _Saga:
    """State tracking and failure translation shared by both sagas."""

    name = "provisioning"

    def __init__(self, ctx: "ServiceContext", caller: "AuthContext | None" = None) -> None:
        self.ctx = ctx
        self.caller = caller
        self.state = SagaState.VALIDATING
        self.outcome = ProvisioningOutcome(state=SagaState.VALIDATING)

    def _enter(self, state: SagaState) -> None:
        logger.debug("saga_state_changed", saga=self.name, previous=self.state, state=state)
        self.state = state
        self.outcome.state = state

    def _abort(self, error: Exception) -> ProvisioningOutcome:
        failed_state = self.state
        self.state = SagaState.ABORTED
        self.outcome.state = SagaState.ABORTED
        self.outcome.error = error
        self.outcome.failed_state = failed_state
        logger.warning(
            "provisioning_aborted",
            saga=self.name,
            failed_state=failed_state,
            error_type=type(error).__name__,
            error=str(error),
            identity_id=self.outcome.identity_id,
        )
        return self.outcome

    def _resolve_identity(self, email: str, password: str, display_name: str) -> str:
        self._enter(SagaState.RESOLVING_IDENTITY)
        resolved = resolve_identity(self.ctx, email, password, display_name)
        self.outcome.identity_id = resolved.identity_id
        self.outcome.identity_created = resolved.created
        return resolved.identity_id

    def _load_organization(self, organization_id: UUID) -> Organization:
        self._enter(SagaState.LOADING_ORGANIZATION)
        if self.caller is not None and not self.caller.can_see_organization(organization_id):
            raise OrganizationNotFound("School not found or not accessible.")
        try:
            organization = (
                Organization.objects.using(self.ctx.db_alias).filter(pk=organization_id).first()
            )
        except DatabaseError as e:
            raise OrganizationLoadError(str(e)) from e
        if organization is None:
            raise OrganizationNotFound("School not found or not accessible.")
        return organization


class TeacherProvisioningSaga(_Saga):
    """
    Provision a teacher: identity, profile and a staff record with a
    freshly allocated registration id.

    Usage:
        outcome = TeacherProvisioningSaga(ctx, caller=request.auth).run(request_data)
        if outcome.ok:
            outcome.registration_id  # e.g. "GPA/T/2024/001"
    """

    name = "teacher_provisioning"

    def run(self, request: TeacherProvisioningRequest) -> ProvisioningOutcome:
        try:
            data = validate_teacher_request(request)

            identity_id = self._resolve_identity(data.email, data.password, data.full_name)
            organization = self._load_organization(data.organization_id)

            self._enter(SagaState.SYNCING_PROFILE)
            sync_profile(
                self.ctx,
                identity_id=identity_id,
                email=data.email,
                full_name=data.full_name,
                role=data.role,
                organization=organization,
            )

            self._enter(SagaState.ALLOCATING_AND_INSERTING)
            record = create_staff_record(
                self.ctx,
                organization=organization,
                cohort_year=data.cohort_year,
                identity_id=identity_id,
                first_name=data.first_name,
                last_name=data.last_name,
                gender=data.gender,
            )
        except SAGA_FAILURES as e:
            return self._abort(e)

        self.outcome.registration_id = record.registration_id
        self._enter(SagaState.DONE)
        logger.info(
            "teacher_provisioned",
            identity_id=identity_id,
            identity_created=self.outcome.identity_created,
            registration_id=record.registration_id,
            organization_id=str(organization.pk),
        )
        return self.outcome


class TeacherUserSaga(_Saga):
    """
    Create (or reuse) an identity and link its profile to a school,
    without allocating a staff record.
    """

    name = "teacher_user"

    def run(self, request: TeacherUserRequest) -> ProvisioningOutcome:
        try:
            data = validate_teacher_user_request(request)

            identity_id = self._resolve_identity(data.email, data.password, "")
            organization = self._load_organization(data.organization_id)

            self._enter(SagaState.SYNCING_PROFILE)
            try:
                sync_profile(
                    self.ctx,
                    identity_id=identity_id,
                    email=data.email,
                    full_name=None,
                    role=data.role,
                    organization=organization,
                )
            except ProfileWriteError as e:
                raise ProfileWriteError(
                    f"Identity resolved, but failed to sync profile: {e}", cause=e.cause
                ) from e
        except SAGA_FAILURES as e:
            return self._abort(e)

        self._enter(SagaState.DONE)
        logger.info(
            "teacher_user_provisioned",
            identity_id=identity_id,
            identity_created=self.outcome.identity_created,
        )
        return self.outcome
