"""Event handlers turning quote and order events into notifications.

Handlers run after the originating transaction has committed.  Each one
only decides who hears about what; delivery goes through
``NotificationDispatcher``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional
from uuid import UUID

import structlog

from modules.notifications.dispatch import INotificationDispatcher, NotificationDispatcher
from modules.notifications.models import NotificationType
from modules.orders.events import OrderCreated, OrderStatusChanged
from modules.quotes.constants import QuoteAction
from modules.quotes.events import (
    QuoteCancelled,
    QuoteMessagePosted,
    QuoteRequested,
    QuoteResponded,
)

if TYPE_CHECKING:
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)

_RESPONSE_TITLES = {
    QuoteAction.ACCEPT: "Quote accepted",
    QuoteAction.REJECT: "Quote rejected",
    QuoteAction.COUNTER: "New counter offer",
}


class _Handler:
    def __init__(self, dispatcher: INotificationDispatcher) -> None:
        self._dispatcher = dispatcher


class QuoteRequestedHandler(_Handler):
    def handle(self, event: QuoteRequested) -> None:
        self._dispatcher.create_notification(
            user_id=event.artisan_id,
            type=NotificationType.QUOTE_REQUEST,
            title="New quote request",
            message=f"You have a new quote request for {event.product_name}.",
            data={"quote_id": str(event.aggregate_id)},
        )


class QuoteRespondedHandler(_Handler):
    def handle(self, event: QuoteResponded) -> None:
        title = _RESPONSE_TITLES.get(event.action, "Quote updated")
        message = f"{title} (status {event.status})."
        if event.price is not None:
            message = f"{title}: {event.price}."
        self._dispatcher.create_notification(
            user_id=event.recipient_id,
            type=NotificationType.QUOTE_RESPONSE,
            title=title,
            message=message,
            data={
                "quote_id": str(event.aggregate_id),
                "action": event.action,
                "status": event.status,
                "price": event.price,
            },
        )


class QuoteMessagePostedHandler(_Handler):
    def handle(self, event: QuoteMessagePosted) -> None:
        self._dispatcher.create_notification(
            user_id=event.recipient_id,
            type=NotificationType.MESSAGE,
            title="New message",
            message="You have a new message on a quote request.",
            data={"quote_id": str(event.aggregate_id)},
        )


class QuoteCancelledHandler(_Handler):
    def handle(self, event: QuoteCancelled) -> None:
        self._dispatcher.create_notification(
            user_id=event.recipient_id,
            type=NotificationType.QUOTE_RESPONSE,
            title="Quote cancelled",
            message="A quote request you were negotiating was cancelled.",
            data={"quote_id": str(event.aggregate_id)},
        )


class OrderCreatedHandler(_Handler):
    def handle(self, event: OrderCreated) -> None:
        data = {"order_id": str(event.aggregate_id), "order_number": event.order_number}
        self._dispatcher.create_notification(
            user_id=event.buyer_id,
            type=NotificationType.ORDER_STATUS,
            title="Order placed",
            message=f"Your order {event.order_number} was placed.",
            data=data,
        )
        for seller_id in event.seller_ids:
            self._dispatcher.create_notification(
                user_id=seller_id,
                type=NotificationType.ORDER_STATUS,
                title="New order",
                message=f"You received order {event.order_number}.",
                data=data,
            )


class OrderStatusChangedHandler(_Handler):
    def handle(self, event: OrderStatusChanged) -> None:
        recipients = _others(
            [event.buyer_id, *event.seller_ids], exclude=event.actor_id
        )
        for user_id in recipients:
            self._dispatcher.create_notification(
                user_id=user_id,
                type=NotificationType.ORDER_STATUS,
                title="Order status updated",
                message=f"Order {event.order_number} is now {event.new_status}.",
                data={
                    "order_id": str(event.aggregate_id),
                    "order_number": event.order_number,
                    "old_status": event.old_status,
                    "new_status": event.new_status,
                },
            )


def _others(user_ids: Iterable[UUID], exclude: Optional[UUID]) -> list[UUID]:
    seen: list[UUID] = []
    for user_id in user_ids:
        if user_id != exclude and user_id not in seen:
            seen.append(user_id)
    return seen


def subscribe_all(
    bus: IEventBus, dispatcher: Optional[INotificationDispatcher] = None
) -> None:
    dispatcher = dispatcher or NotificationDispatcher()
    bus.subscribe(QuoteRequested, QuoteRequestedHandler(dispatcher))
    bus.subscribe(QuoteResponded, QuoteRespondedHandler(dispatcher))
    bus.subscribe(QuoteMessagePosted, QuoteMessagePostedHandler(dispatcher))
    bus.subscribe(QuoteCancelled, QuoteCancelledHandler(dispatcher))
    bus.subscribe(OrderCreated, OrderCreatedHandler(dispatcher))
    bus.subscribe(OrderStatusChanged, OrderStatusChangedHandler(dispatcher))
    logger.debug("notifications.handlers_subscribed")
