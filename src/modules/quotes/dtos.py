"""Quote DTOs for the Service Layer.

Framework-agnostic, immutable (``frozen=True``) Pydantic v2 models.
Field-level limits live here; rules that depend on the quote's state or
on the chosen action are checked by ``QuoteNegotiator``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.quotes.constants import (
    MAX_EXPIRY_DAYS,
    MAX_MESSAGE_LENGTH,
    MAX_SPECIFICATIONS_LENGTH,
    QuoteAction,
)


class CreateQuoteRequestDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    requested_price: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    specifications: Optional[str] = Field(
        default=None, max_length=MAX_SPECIFICATIONS_LENGTH
    )
    expires_in_days: Optional[int] = Field(default=None, ge=1, le=MAX_EXPIRY_DAYS)


class RespondToQuoteDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: QuoteAction
    counter_offer: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    message: Optional[str] = Field(default=None, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("message")
    @classmethod
    def blank_message_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class AddQuoteMessageDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str = Field(max_length=MAX_MESSAGE_LENGTH)

    @field_validator("message")
    @classmethod
    def message_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be empty.")
        return v.strip()


class CancelQuoteDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: Optional[str] = Field(default=None, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("reason")
    @classmethod
    def blank_reason_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v
