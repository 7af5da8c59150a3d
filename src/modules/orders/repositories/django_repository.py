"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Writes run
inside the caller's ``transaction.atomic`` block; status changes lock the
order row with ``select_for_update()``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _with_details(self):
        return Order.objects.select_related("buyer", "quote_request").prefetch_related(
            "items", "status_history"
        )

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any], items: List[Dict[str, Any]]) -> Order:
        order = Order.objects.create(**data)
        OrderItem.objects.bulk_create(
            [OrderItem(order=order, **item_data) for item_data in items]
        )
        logger.info(
            "order.persisted", order_id=str(order.id), item_count=len(items)
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with items and status history prefetched.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return self._with_details().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_number(self, order_number: str) -> Optional[Order]:
        return self._with_details().filter(order_number=order_number).first()

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock.

        Items are prefetched so the caller can iterate them while the row
        is locked.  Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_for_update(of=("self",))
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def number_exists(self, order_number: str) -> bool:
        return Order.objects.filter(order_number=order_number).exists()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = self._with_details()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_for_buyer(self, buyer_id: UUID) -> List[Order]:
        return list(self._with_details().filter(buyer_id=buyer_id))

    def list_for_seller(self, seller_id: UUID) -> List[Order]:
        return list(self.queryset_for_seller(seller_id))

    def queryset_for_buyer(self, buyer_id: UUID):
        """Unevaluated queryset for filtered/paginated API listing."""
        return self._with_details().filter(buyer_id=buyer_id)

    def queryset_for_seller(self, seller_id: UUID):
        return self._with_details().filter(items__seller_id=seller_id).distinct()

    def queryset_all(self):
        return self._with_details()

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, entity: Order) -> Order:
        entity.save()
        return entity

    # ------------------------------------------------------------------
    # Status history
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: UUID,
        status: str,
        note: str = "",
        old_status: Optional[str] = None,
        created_by_id: Optional[UUID] = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            status=status,
            old_status=old_status,
            note=note,
            created_by_id=created_by_id,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=status,
        )
        return history

    def list_history(self, order_id: UUID) -> List[OrderStatusHistory]:
        return list(
            OrderStatusHistory.objects.filter(order_id=order_id)
            .select_related("created_by")
            .order_by("created_at", "id")
        )
