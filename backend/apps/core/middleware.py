"""
Core middleware.
"""

from collections.abc import Callable
from uuid import uuid4

from django.http import HttpRequest, HttpResponse

from apps.core.logging import bind_contextvars, clear_contextvars

REQUEST_ID_HEADER = "X-Request-ID"


def _client_ip(request: HttpRequest) -> str:
    """First hop of X-Forwarded-For, else REMOTE_ADDR."""
    forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR") or "unknown"


class RequestContextMiddleware:
    """
    Binds per-request logging context.

    Reuses the caller's X-Request-ID when present so provisioning calls can be
    traced across the UI and this service; otherwise a fresh uuid4 is used.
    The id is echoed back on the response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        trace_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())

        clear_contextvars()
        bind_contextvars(
            trace_id=trace_id,
            **{
                "http.method": request.method,
                "http.url_details.path": request.path,
                "network.client.ip": _client_ip(request),
            },
        )
        try:
            response = self.get_response(request)
        finally:
            clear_contextvars()

        response[REQUEST_ID_HEADER] = trace_id
        return response
