"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are the
contracts between the API layer (DRF Serializers) and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateOrderFromCartDTO``: checkout of the caller's cart.
- ``CreateOrderFromQuoteDTO``: checkout of an ACCEPTED quote.
- ``UpdateOrderStatusDTO``: manual status change.
- ``UpdateShippingInfoDTO``: seller-provided tracking details.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import OrderStatus, PaymentMethod


class CreateOrderFromCartDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    address_id: UUID
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    notes: Optional[str] = Field(default="", max_length=1000)


class CreateOrderFromQuoteDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    quote_request_id: UUID
    address_id: UUID
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    notes: Optional[str] = Field(default="", max_length=1000)


class UpdateOrderStatusDTO(BaseModel):
    """Target status plus an optional note for the history row."""

    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    note: Optional[str] = Field(default=None, max_length=500)

    @field_validator("status", mode="before")
    @classmethod
    def normalise_status(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class UpdateShippingInfoDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    tracking_number: Optional[str] = Field(default=None, max_length=100)
    tracking_url: Optional[str] = Field(default=None, max_length=500)
    estimated_delivery: Optional[date] = None

    @model_validator(mode="after")
    def at_least_one_field(self):
        if (
            not self.tracking_number
            and not self.tracking_url
            and self.estimated_delivery is None
        ):
            raise ValueError("Provide at least one shipping field to update.")
        return self
