"""Order domain exceptions.

Raised by the Service Layer and the order components when business rules
are violated.  The API layer renders them with ``domain_error_response``.
"""

from __future__ import annotations

from modules.core.exceptions import Forbidden, InvalidState, NotFound, ServiceError


class OrderNotFound(NotFound):
    default_code = "ORDER_NOT_FOUND"


class InvalidStatusTransition(InvalidState):
    """The target status is not adjacent to the current one."""

    default_code = "INVALID_STATUS_TRANSITION"


class NotOrderParticipant(Forbidden):
    """The actor is neither the buyer nor a seller on the order."""

    default_code = "FORBIDDEN"


class ForbiddenStatusChange(Forbidden):
    """The actor's role may not perform this transition."""

    default_code = "FORBIDDEN_STATUS_CHANGE"


class NotOrderSeller(Forbidden):
    default_code = "NOT_ORDER_SELLER"


class InvalidOrderState(InvalidState):
    """The operation is not valid for the order's current status."""

    default_code = "INVALID_ORDER_STATE"


class OrderNumberGenerationFailed(ServiceError):
    default_code = "ORDER_NUMBER_GENERATION_FAILED"
