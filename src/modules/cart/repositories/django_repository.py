"""Django ORM implementation of the cart repository."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import F

from modules.cart.models import CartItem
from modules.cart.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)


class CartDjangoRepository(ICartRepository):
    def list_for_user(self, user_id: UUID) -> List[CartItem]:
        return list(
            CartItem.objects.select_related("product", "product__seller")
            .filter(user_id=user_id)
            .order_by("created_at")
        )

    def get_item(self, user_id: UUID, product_id: UUID) -> Optional[CartItem]:
        return (
            CartItem.objects.select_related("product")
            .filter(user_id=user_id, product_id=product_id)
            .first()
        )

    @transaction.atomic
    def add(self, user_id: UUID, product_id: UUID, quantity: int) -> CartItem:
        item, created = CartItem.objects.select_for_update().get_or_create(
            user_id=user_id,
            product_id=product_id,
            defaults={"quantity": quantity},
        )
        if not created:
            CartItem.objects.filter(id=item.id).update(
                quantity=F("quantity") + quantity
            )
            item.refresh_from_db()
        logger.info(
            "cart.item_added",
            user_id=str(user_id),
            product_id=str(product_id),
            quantity=item.quantity,
        )
        return item

    def set_quantity(self, item: CartItem, quantity: int) -> CartItem:
        item.quantity = quantity
        item.save(update_fields=["quantity", "updated_at"])
        return item

    def remove(self, user_id: UUID, product_id: UUID) -> bool:
        deleted, _ = CartItem.objects.filter(
            user_id=user_id, product_id=product_id
        ).delete()
        return deleted > 0

    def clear(self, user_id: UUID) -> int:
        deleted, _ = CartItem.objects.filter(user_id=user_id).delete()
        logger.info("cart.cleared", user_id=str(user_id), removed=deleted)
        return deleted
