"""User and address lookup contracts consumed by the workflow engine."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IReadRepository

if TYPE_CHECKING:
    from modules.accounts.models import Address, User


class IUserRepository(IReadRepository["User"]):
    """Read-only access to marketplace users (role, identity)."""


class IAddressRepository(IReadRepository["Address"]):
    """Read-only access to shipping addresses."""

    @abstractmethod
    def get_for_user(self, id: str, user_id: str) -> Optional[Address]:
        """Retrieve an address only if it belongs to ``user_id``."""
