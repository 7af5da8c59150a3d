"""Catalogue and stock exceptions."""

from __future__ import annotations

from modules.core.exceptions import InsufficientStock, NotFound


class ProductNotFound(NotFound):
    """The referenced product does not exist."""

    default_code = "PRODUCT_NOT_FOUND"


class OutOfStock(InsufficientStock):
    """A conditional stock decrement matched no row."""

    default_code = "INSUFFICIENT_STOCK"
