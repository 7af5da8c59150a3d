"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the Order aggregate
needs: creation with items, row locking, the status history trail and
buyer / seller look-ups.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderItem children and OrderStatusHistory
    records.  Callers own the transaction.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any], items: List[Dict[str, Any]]) -> Order:
        """Insert an order and its items.

        ``items`` are dicts with ``product_id``, ``seller_id``,
        ``quantity``, ``price`` and ``product_data``.
        """

    @abstractmethod
    def get_by_number(self, order_number: str) -> Optional[Order]:
        """Retrieve an order by its human-readable number."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def number_exists(self, order_number: str) -> bool:
        """Whether an order already carries ``order_number``."""

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        status: str,
        note: str = "",
        old_status: Optional[str] = None,
        created_by_id: Optional[UUID] = None,
    ) -> OrderStatusHistory:
        """Append a row to the order's audit trail."""

    @abstractmethod
    def list_history(self, order_id: UUID) -> List[OrderStatusHistory]:
        """History rows for an order, oldest first."""

    @abstractmethod
    def list_for_buyer(self, buyer_id: UUID) -> List[Order]:
        """Orders placed by ``buyer_id``, newest first."""

    @abstractmethod
    def list_for_seller(self, seller_id: UUID) -> List[Order]:
        """Orders containing at least one item sold by ``seller_id``."""
