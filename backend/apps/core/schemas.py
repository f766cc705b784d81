"""
Core schemas - shared Pydantic models for API responses.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format. Clients display the message verbatim."""

    error: str = Field(..., description="Human-readable error message")

    model_config = {"json_schema_extra": {"example": {"error": "email is required"}}}
