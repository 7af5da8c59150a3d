"""Domain events for the Quotes bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class QuoteRequested(DomainEvent):
    """A customer opened a negotiation; the artisan should hear about it."""

    customer_id: UUID
    artisan_id: UUID
    product_name: str


@dataclass(frozen=True, kw_only=True)
class QuoteResponded(DomainEvent):
    """One party accepted, rejected or countered."""

    responder_id: UUID
    recipient_id: UUID
    action: str
    status: str
    price: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class QuoteMessagePosted(DomainEvent):
    sender_id: UUID
    recipient_id: UUID


@dataclass(frozen=True, kw_only=True)
class QuoteCancelled(DomainEvent):
    cancelled_by: UUID
    recipient_id: UUID
