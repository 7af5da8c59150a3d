"""Checkout validation for a user's cart.

Fails closed: an empty cart is invalid, and a single missing, unpublished
or understocked product fails the whole cart.  The validator only reads,
so it is safe to call as often as needed (the cart page and the checkout
both call it).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List
from uuid import UUID

import structlog

from modules.cart.dtos import CartValidationResult, InvalidCartItem
from modules.catalog.models import ProductStatus

if TYPE_CHECKING:
    from modules.cart.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)

EMPTY_CART_REASON = "Your cart is empty"
UNAVAILABLE_ITEMS_REASON = "Some items in your cart are out of stock or unavailable"


class CartValidator:
    def __init__(self, cart_repository: ICartRepository) -> None:
        self._cart_repo = cart_repository

    def validate(self, user_id: UUID) -> CartValidationResult:
        log = logger.bind(user_id=str(user_id))
        items = self._cart_repo.list_for_user(user_id)
        if not items:
            log.info("cart.validation_failed", reason="empty")
            return CartValidationResult(valid=False, reason=EMPTY_CART_REASON)

        invalid: List[InvalidCartItem] = []
        for item in items:
            product = item.product
            if product.status == ProductStatus.DELETED:
                invalid.append(
                    InvalidCartItem(
                        product_id=product.id,
                        product_name=product.name,
                        requested=item.quantity,
                        available=0,
                        reason="PRODUCT_NOT_FOUND",
                        message="Product no longer exists",
                    )
                )
            elif product.status != ProductStatus.PUBLISHED:
                invalid.append(
                    InvalidCartItem(
                        product_id=product.id,
                        product_name=product.name,
                        requested=item.quantity,
                        available=product.quantity,
                        reason="PRODUCT_UNAVAILABLE",
                        message="Product is no longer available",
                    )
                )
            elif product.quantity < item.quantity:
                message = (
                    "Product is out of stock"
                    if product.quantity == 0
                    else f"Only {product.quantity} available, but {item.quantity} requested"
                )
                invalid.append(
                    InvalidCartItem(
                        product_id=product.id,
                        product_name=product.name,
                        requested=item.quantity,
                        available=product.quantity,
                        reason="OUT_OF_STOCK",
                        message=message,
                    )
                )

        if invalid:
            log.info("cart.validation_failed", invalid_count=len(invalid))
            return CartValidationResult(
                valid=False,
                reason=UNAVAILABLE_ITEMS_REASON,
                invalid_items=invalid,
            )

        log.info("cart.validation_passed", item_count=len(items))
        return CartValidationResult(valid=True)
