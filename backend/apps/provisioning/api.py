"""
Provisioning API endpoints.

Both endpoints are admin-only and scoped to the caller's own school.
Every failure is reported as ``{"error": message}`` with a status that
reflects the failure class; once an identity has been resolved its id is
included as ``user_id``, so the caller can tell an identity now exists.
"""

from django.http import HttpRequest
from ninja import Router

from apps.core.auth import AuthContext
from apps.core.context import build_service_context
from apps.core.security import BearerAuth
from apps.provisioning.exceptions import OrganizationNotFound, RequestValidationError
from apps.provisioning.schemas import (
    CreateTeacherUserRequest,
    ProvisioningErrorResponse,
    ProvisionTeacherRequest,
    ProvisionTeacherResponse,
    TeacherUserResponse,
)
from apps.provisioning.services import (
    ProvisioningOutcome,
    TeacherProvisioningRequest,
    TeacherProvisioningSaga,
    TeacherUserRequest,
    TeacherUserSaga,
)

router = Router(tags=["provisioning"])
bearer_auth = BearerAuth()

ERROR_STATUS: dict[type[Exception], int] = {
    RequestValidationError: 400,
    OrganizationNotFound: 404,
}

ERROR_CODES = frozenset({400, 403, 404, 500})

ACCESS_DENIED = "Access denied. Only ADMIN can provision teachers."


def status_for(error: Exception | None) -> int:
    """HTTP status for a saga failure; store and allocation failures are 500."""
    for error_class, status in ERROR_STATUS.items():
        if isinstance(error, error_class):
            return status
    return 500


def _failure(outcome: ProvisioningOutcome) -> tuple[int, ProvisioningErrorResponse]:
    return status_for(outcome.error), ProvisioningErrorResponse(
        error=outcome.message or "Provisioning failed.",
        user_id=outcome.identity_id,
    )


@router.post(
    "/teachers",
    response={200: ProvisionTeacherResponse, ERROR_CODES: ProvisioningErrorResponse},
    auth=bearer_auth,
    exclude_none=True,
    operation_id="provisionTeacher",
    summary="Provision a teacher",
)
def provision_teacher(request: HttpRequest, payload: ProvisionTeacherRequest):
    """
    Create or reuse the teacher's identity, link their profile to the school,
    and issue a staff record with a new registration id.
    """
    caller: AuthContext = request.auth  # type: ignore[attr-defined]
    if not caller.is_admin:
        return 403, ProvisioningErrorResponse(error=ACCESS_DENIED)

    ctx = build_service_context(actor_id=caller.identity_id)
    outcome = TeacherProvisioningSaga(ctx, caller=caller).run(
        TeacherProvisioningRequest(**payload.model_dump())
    )
    if not outcome.ok:
        return _failure(outcome)

    return 200, ProvisionTeacherResponse(
        identity_id=outcome.identity_id,
        registration_id=outcome.registration_id,
    )


@router.post(
    "/teacher-users",
    response={200: TeacherUserResponse, ERROR_CODES: ProvisioningErrorResponse},
    auth=bearer_auth,
    exclude_none=True,
    operation_id="createTeacherUser",
    summary="Create a teacher login",
)
def create_teacher_user(request: HttpRequest, payload: CreateTeacherUserRequest):
    """
    Create or reuse an identity and link its profile to the school,
    without issuing a staff record.
    """
    caller: AuthContext = request.auth  # type: ignore[attr-defined]
    if not caller.is_admin:
        return 403, ProvisioningErrorResponse(error=ACCESS_DENIED)

    ctx = build_service_context(actor_id=caller.identity_id)
    outcome = TeacherUserSaga(ctx, caller=caller).run(TeacherUserRequest(**payload.model_dump()))
    if not outcome.ok:
        return _failure(outcome)

    return 200, TeacherUserResponse(user_id=outcome.identity_id)
