"""Cart DTOs and result types.

``CartValidationResult`` is what ``CartValidator`` returns; it is plain
data so it can be attached to an ``INVALID_CART`` error unchanged.

``CartItemUpdated`` / ``CartItemRemoved`` are the two outcomes of a
quantity update.  Setting a quantity to 0 removes the line and is a
normal result, not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from modules.cart.models import CartItem


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class AddToCartDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int = 1

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be greater than 0.")
        return v


class UpdateCartItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Quantity cannot be negative.")
        return v


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------


class InvalidCartItem(BaseModel):
    """A cart line that blocks checkout."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: Optional[str] = None
    requested: int
    available: int
    reason: Literal["PRODUCT_NOT_FOUND", "PRODUCT_UNAVAILABLE", "OUT_OF_STOCK"]
    message: str


class CartValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: Optional[str] = None
    invalid_items: List[InvalidCartItem] = []


# ---------------------------------------------------------------------------
# Quantity update outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CartItemUpdated:
    item: CartItem


@dataclass(frozen=True)
class CartItemRemoved:
    product_id: UUID


CartItemUpdateResult = Union[CartItemUpdated, CartItemRemoved]


@dataclass(frozen=True)
class CartSummary:
    items: List[CartItem]
    total_quantity: int
    subtotal: Decimal
