"""Cart service layer (Use Cases).

Manages the lines a buyer collects before checkout.  Stock is only
*checked* here; it is reserved when the order is created.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from django.db import transaction

from modules.accounts.exceptions import UserNotFound
from modules.cart.dtos import (
    CartItemRemoved,
    CartItemUpdated,
    CartItemUpdateResult,
    CartSummary,
    CartValidationResult,
)
from modules.cart.exceptions import (
    CannotBuyOwnProduct,
    CartItemNotFound,
    NotEnoughStock,
    ProductUnavailable,
)
from modules.catalog.exceptions import ProductNotFound
from modules.catalog.models import ProductStatus
from modules.core.exceptions import storage_errors_as_service_error

if TYPE_CHECKING:
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.cart.dtos import AddToCartDTO, UpdateCartItemDTO
    from modules.cart.models import CartItem
    from modules.cart.repositories.interfaces import ICartRepository
    from modules.cart.validators import CartValidator
    from modules.catalog.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CartService:
    """Application service for cart use-cases.

    Receives repositories and the validator via constructor injection.
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
        user_repository: IUserRepository,
        validator: CartValidator,
    ) -> None:
        self._cart_repo = cart_repository
        self._product_repo = product_repository
        self._user_repo = user_repository
        self._validator = validator

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @storage_errors_as_service_error("Failed to add item to cart")
    @transaction.atomic
    def add_to_cart(self, user_id: UUID, dto: AddToCartDTO) -> CartItem:
        """Add ``dto.quantity`` units of a product, merging with an existing line.

        Raises:
            UserNotFound, ProductNotFound: unknown user or product.
            ProductUnavailable: product is not published.
            CannotBuyOwnProduct: the user sells this product.
            NotEnoughStock: the resulting line quantity exceeds stock.
        """
        if not self._user_repo.get_by_id(str(user_id)):
            raise UserNotFound(f"User {user_id} not found.")

        product = self._product_repo.get_by_id(str(dto.product_id))
        if not product:
            raise ProductNotFound(f"Product {dto.product_id} not found.")
        if product.status != ProductStatus.PUBLISHED:
            raise ProductUnavailable("Product is not available for purchase.")
        if product.seller_id == user_id:
            raise CannotBuyOwnProduct("You cannot add your own product to cart.")

        existing = self._cart_repo.get_item(user_id, product.id)
        wanted = dto.quantity + (existing.quantity if existing else 0)
        if product.quantity < wanted:
            raise NotEnoughStock(
                f"Not enough stock. Only {product.quantity} available.",
                details={"available": product.quantity, "requested": wanted},
            )

        return self._cart_repo.add(user_id, product.id, dto.quantity)

    @storage_errors_as_service_error("Failed to update cart item")
    def update_item_quantity(
        self, user_id: UUID, product_id: UUID, dto: UpdateCartItemDTO
    ) -> CartItemUpdateResult:
        """Set a line's quantity; 0 removes the line.

        Returns ``CartItemRemoved`` or ``CartItemUpdated``.
        """
        log = logger.bind(user_id=str(user_id), product_id=str(product_id))
        item = self._cart_repo.get_item(user_id, product_id)
        if not item:
            raise CartItemNotFound(f"Product {product_id} is not in the cart.")

        if dto.quantity == 0:
            self._cart_repo.remove(user_id, product_id)
            log.info("cart.item_removed", via="zero_quantity")
            return CartItemRemoved(product_id=product_id)

        if item.product.quantity < dto.quantity:
            raise NotEnoughStock(
                f"Not enough stock. Only {item.product.quantity} available.",
                details={"available": item.product.quantity, "requested": dto.quantity},
            )

        item = self._cart_repo.set_quantity(item, dto.quantity)
        log.info("cart.item_updated", quantity=dto.quantity)
        return CartItemUpdated(item=item)

    @storage_errors_as_service_error("Failed to remove item from cart")
    def remove_from_cart(self, user_id: UUID, product_id: UUID) -> None:
        if not self._cart_repo.remove(user_id, product_id):
            raise CartItemNotFound(f"Product {product_id} is not in the cart.")
        logger.info(
            "cart.item_removed", user_id=str(user_id), product_id=str(product_id)
        )

    @storage_errors_as_service_error("Failed to clear cart")
    def clear_cart(self, user_id: UUID) -> int:
        return self._cart_repo.clear(user_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_cart(self, user_id: UUID) -> CartSummary:
        items = self._cart_repo.list_for_user(user_id)
        subtotal = sum(
            (item.product.effective_price * item.quantity for item in items),
            Decimal("0.00"),
        )
        return CartSummary(
            items=items,
            total_quantity=sum(item.quantity for item in items),
            subtotal=subtotal,
        )

    def validate_for_checkout(self, user_id: UUID) -> CartValidationResult:
        return self._validator.validate(user_id)
