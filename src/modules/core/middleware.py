"""Request-scoped logging context.

Every log line emitted while serving a request carries its
``correlation_id``; the finishing line also names the caller once DRF has
authenticated them.
"""

import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware:
    """Bind a correlation ID for the request and echo it back.

    The ID comes from ``X-Request-ID`` when the client sends one, otherwise
    a fresh UUID4 is used.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        started = time.monotonic()
        response = self.get_response(request)

        # DRF copies the authenticated user onto the underlying request.
        user = getattr(request, "user", None)
        logger.info(
            "request.finished",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
            user_id=str(user.pk) if user is not None and user.is_authenticated else None,
            role=getattr(user, "role", None),
        )

        response[REQUEST_ID_HEADER] = cid
        return response
