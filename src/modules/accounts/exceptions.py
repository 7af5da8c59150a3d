"""Account lookup exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFound


class UserNotFound(NotFound):
    """The referenced user does not exist or is inactive."""

    default_code = "USER_NOT_FOUND"


class AddressNotFound(NotFound):
    """The address does not exist or belongs to another user."""

    default_code = "ADDRESS_NOT_FOUND"
