"""Translate domain errors into DRF responses."""

from __future__ import annotations

import structlog
from rest_framework.response import Response

from modules.core.exceptions import DomainError

logger = structlog.get_logger(__name__)


def domain_error_response(exc: DomainError) -> Response:
    """Render ``exc`` as ``{"code", "detail", "details"?}`` with its HTTP status."""
    logger.info(
        "api.domain_error",
        kind=exc.kind,
        code=exc.code,
        status_code=exc.status_code,
    )
    return Response(exc.as_dict(), status=exc.status_code)
