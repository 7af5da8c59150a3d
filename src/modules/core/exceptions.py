"""Domain error taxonomy shared by every module.

Each module declares its concrete exceptions in its own ``exceptions.py``
by subclassing one of the kinds below and setting ``default_code``.
Services raise them at the point of detection; the API layer translates
them into HTTP responses using ``status_code``.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Optional, TypeVar, cast

import structlog
from django.db import DatabaseError

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class DomainError(Exception):
    """Base class for every business-rule violation."""

    kind: str = "SERVICE_ERROR"
    status_code: int = 500
    default_code: str = "SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "detail": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class NotFound(DomainError):
    """The order, quote, product, user or address does not exist."""

    kind = "NOT_FOUND"
    status_code = 404
    default_code = "NOT_FOUND"


class Forbidden(DomainError):
    """The actor lacks permission for the action or role."""

    kind = "FORBIDDEN"
    status_code = 403
    default_code = "FORBIDDEN"


class InvalidState(DomainError):
    """The transition or action is not valid from the current status."""

    kind = "INVALID_STATE"
    status_code = 409
    default_code = "INVALID_STATE"


class InsufficientStock(DomainError):
    """Requested quantity is not available at checkout."""

    kind = "INSUFFICIENT_STOCK"
    status_code = 409
    default_code = "INSUFFICIENT_STOCK"


class InvalidCart(DomainError):
    """Checkout validation failed."""

    kind = "INVALID_CART"
    status_code = 400
    default_code = "INVALID_CART"


class DomainValidationError(DomainError):
    """Malformed or incomplete input."""

    kind = "VALIDATION_ERROR"
    status_code = 400
    default_code = "VALIDATION_ERROR"


class ServiceError(DomainError):
    """Unexpected or storage failure, wrapped before leaving a service."""


def storage_errors_as_service_error(message: str) -> Callable[[F], F]:
    """Wrap unexpected ``DatabaseError``s raised by a service method.

    Apply it outside ``transaction.atomic`` so the rollback has already
    happened when the ``ServiceError`` is raised.  Storage detail stays in
    the log and in ``__cause__``, never in the message.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except DatabaseError as exc:
                logger.exception("service.storage_error", operation=func.__qualname__)
                raise ServiceError(message) from exc

        return cast(F, wrapper)

    return decorator
