"""Cart domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import (
    DomainValidationError,
    InsufficientStock,
    InvalidCart,
    NotFound,
)


class CartItemNotFound(NotFound):
    """The product is not in the user's cart."""

    default_code = "CART_ITEM_NOT_FOUND"


class ProductUnavailable(DomainValidationError):
    """The product is not published and cannot be bought."""

    default_code = "PRODUCT_UNAVAILABLE"


class CannotBuyOwnProduct(DomainValidationError):
    """Sellers cannot put their own products in a cart."""

    default_code = "CANNOT_BUY_OWN_PRODUCT"


class InvalidQuantity(DomainValidationError):
    default_code = "INVALID_QUANTITY"


class NotEnoughStock(InsufficientStock):
    """Requested cart quantity exceeds the product's available stock."""

    default_code = "INSUFFICIENT_STOCK"


class CartValidationFailed(InvalidCart):
    """Checkout was attempted with an empty or unpurchasable cart.

    ``details`` carries the invalid items reported by ``CartValidator``.
    """

    default_code = "INVALID_CART"
