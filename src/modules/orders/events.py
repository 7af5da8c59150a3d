"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created from a cart or a quote."""

    order_number: str
    buyer_id: UUID
    seller_ids: tuple[UUID, ...] = field(default_factory=tuple)
    total: str = "0.00"


@dataclass(frozen=True, kw_only=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every successful transition, cancellations included."""

    order_number: str
    buyer_id: UUID
    old_status: str
    new_status: str
    actor_id: Optional[UUID] = None
    seller_ids: tuple[UUID, ...] = field(default_factory=tuple)
