"""
Provisioning API schemas - Pydantic models for request/response.

Request fields are deliberately loose (all optional strings): the saga's
validation step owns the rules so that every rejection comes back as a
400 with a single readable message.
"""

from pydantic import BaseModel, Field

from apps.core.schemas import ErrorResponse

# --- Request Schemas ---


class ProvisionTeacherRequest(BaseModel):
    """Request to provision a teacher with a staff record."""

    email: str | None = Field(None, examples=["a.mugisha@example.org"])
    password: str | None = Field(None, description="At least 6 characters")
    role: str | None = Field(None, examples=["TEACHER"])
    organization_id: str | None = Field(
        None,
        description="School id",
        examples=["3f2c8a52-6a0e-4a4b-9d43-0f7e4b8f2f11"],
    )
    first_name: str | None = Field(None, examples=["Alice"])
    last_name: str | None = Field(None, examples=["Mugisha"])
    gender: str | None = Field(None, examples=["female"])
    cohort_year: str | None = Field(None, description="Year of entry, 4 digits", examples=["2024"])

    model_config = {"coerce_numbers_to_str": True}


class CreateTeacherUserRequest(BaseModel):
    """Request to create a teacher identity and profile only."""

    email: str | None = Field(None, examples=["a.mugisha@example.org"])
    password: str | None = Field(None, description="At least 6 characters")
    role: str | None = Field(None, description="Defaults to TEACHER", examples=["TEACHER"])
    organization_id: str | None = Field(None, description="School id")


# --- Response Schemas ---


class ProvisionTeacherResponse(BaseModel):
    """Teacher provisioned."""

    ok: bool = True
    identity_id: str = Field(..., description="Identity store user id")
    registration_id: str = Field(..., description="Allocated registration id")

    model_config = {
        "json_schema_extra": {
            "example": {
                "ok": True,
                "identity_id": "user-live-1b2c3d",
                "registration_id": "GPA/T/2024/001",
            }
        }
    }


class TeacherUserResponse(BaseModel):
    """Identity resolved and profile linked."""

    user_id: str = Field(..., description="Identity store user id")


class ProvisioningErrorResponse(ErrorResponse):
    """
    Provisioning failure.

    user_id is present only when the identity had already been resolved
    before the failure.
    """

    user_id: str | None = Field(None, description="Identity store user id that was resolved")
