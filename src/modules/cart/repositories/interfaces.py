"""Cart repository contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

if TYPE_CHECKING:
    from modules.cart.models import CartItem


class ICartRepository(ABC):
    """Per-user cart storage, keyed by (user, product)."""

    @abstractmethod
    def list_for_user(self, user_id: UUID) -> List[CartItem]:
        """Return the user's cart lines with products eagerly loaded."""

    @abstractmethod
    def get_item(self, user_id: UUID, product_id: UUID) -> Optional[CartItem]:
        """Return a single cart line, ``None`` when absent."""

    @abstractmethod
    def add(self, user_id: UUID, product_id: UUID, quantity: int) -> CartItem:
        """Insert a line or add ``quantity`` to the existing one."""

    @abstractmethod
    def set_quantity(self, item: CartItem, quantity: int) -> CartItem:
        """Overwrite a line's quantity."""

    @abstractmethod
    def remove(self, user_id: UUID, product_id: UUID) -> bool:
        """Delete a line; ``False`` when it did not exist."""

    @abstractmethod
    def clear(self, user_id: UUID) -> int:
        """Delete every line of the user's cart, returning the count."""
