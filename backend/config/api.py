"""
Django Ninja API configuration.
"""

from django.http import HttpRequest, HttpResponse
from ninja import NinjaAPI
from ninja.errors import HttpError, ValidationError

from apps.core.logging import get_logger
from apps.provisioning.api import router as provisioning_router

logger = get_logger(__name__)

api = NinjaAPI(
    title="School Provisioning API",
    version="1.0.0",
    description="Provisions teacher identities, profiles and staff records.",
    openapi_extra={
        "tags": [
            {
                "name": "provisioning",
                "description": "Teacher identity, profile and registration id provisioning",
            },
            {
                "name": "health",
                "description": "Service health and readiness checks",
            },
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                    "description": "Session JWT from the identity provider. Include as: Authorization: Bearer <session_jwt>",
                }
            }
        },
    },
)

api.add_router("/provisioning", provisioning_router)


@api.exception_handler(ValidationError)
def request_validation_error(request: HttpRequest, exc: ValidationError) -> HttpResponse:
    """Malformed bodies get the same 400 {error} shape as field-level rejections."""
    logger.info("request_body_rejected", errors=len(exc.errors))
    return api.create_response(request, {"error": "Invalid request body."}, status=400)


@api.exception_handler(HttpError)
def http_error(request: HttpRequest, exc: HttpError) -> HttpResponse:
    """Framework-raised errors (unparseable JSON, auth) in the {error} shape."""
    return api.create_response(request, {"error": exc.message}, status=exc.status_code)


@api.exception_handler(Exception)
def unexpected_error(request: HttpRequest, exc: Exception) -> HttpResponse:
    logger.exception("unexpected_server_error")
    return api.create_response(request, {"error": "Unexpected server error"}, status=500)


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
