"""Order service layer (Use Cases).

Orchestrates order creation, status management, payment and shipping.
Every write is one ``transaction.atomic`` unit of work: row creation or
update, history append and stock adjustment commit or roll back together.
Domain events are published only after commit.

Business rules enforced (see ``OrderAssembler`` and ``OrderStateMachine``):
- Orders come from exactly one origin, a valid cart or an ACCEPTED quote.
- Stock is taken once at creation and restored once on cancellation.
- Transitions follow the adjacency table, then the role table.
- Payment moves PENDING -> PAID as the system actor.
- Sellers add tracking details while PROCESSING or SHIPPED; a tracking
  number on a PROCESSING order ships it.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

import structlog
from django.db import DatabaseError, transaction

from modules.core.exceptions import storage_errors_as_service_error
from modules.orders.constants import (
    SHIPPING_EDITABLE_STATES,
    OrderStatus,
    PaymentStatus,
)
from modules.orders.events import OrderCreated, OrderStatusChanged
from modules.orders.exceptions import InvalidOrderState, NotOrderSeller, OrderNotFound

if TYPE_CHECKING:
    from modules.cart.repositories.interfaces import ICartRepository
    from modules.orders.assembler import OrderAssembler
    from modules.orders.dtos import (
        CreateOrderFromCartDTO,
        CreateOrderFromQuoteDTO,
        UpdateOrderStatusDTO,
        UpdateShippingInfoDTO,
    )
    from modules.orders.models import Order, OrderStatusHistory
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.state_machine import OrderStateMachine
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)

PAYMENT_COMPLETED_NOTE = "Payment completed"
TRACKING_ADDED_NOTE = "Tracking number added"


class OrderService:
    """Application service for Order use-cases.

    Receives repositories and components via constructor injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        cart_repository: ICartRepository,
        assembler: OrderAssembler,
        state_machine: OrderStateMachine,
        event_bus: IEventBus,
    ) -> None:
        self._order_repo = order_repository
        self._cart_repo = cart_repository
        self._assembler = assembler
        self._state_machine = state_machine
        self._bus = event_bus

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @storage_errors_as_service_error("Failed to create order")
    def create_order_from_cart(
        self, user_id: UUID, dto: CreateOrderFromCartDTO
    ) -> Order:
        """Check out the user's cart.

        Raises:
            UserNotFound, AddressNotFound: unknown buyer or foreign address.
            CartValidationFailed: empty cart or unpurchasable items.
            OutOfStock: stock ran out between validation and decrement.
            OrderNumberGenerationFailed: numbering retries exhausted.
        """
        with transaction.atomic():
            order = self._assembler.from_cart(user_id, dto)
            self._publish_created(order)

        self._clear_cart(user_id)
        return self._reload(order.id)

    @storage_errors_as_service_error("Failed to create order from quote")
    @transaction.atomic
    def create_order_from_quote(
        self, user_id: UUID, dto: CreateOrderFromQuoteDTO
    ) -> Order:
        """Order an ACCEPTED quote; the quote becomes COMPLETED in the same commit."""
        order = self._assembler.from_quote(user_id, dto)
        self._publish_created(order)
        return self._reload(order.id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @storage_errors_as_service_error("Failed to update order status")
    @transaction.atomic
    def update_order_status(
        self,
        order_id: UUID | str,
        dto: UpdateOrderStatusDTO,
        actor_id: Optional[UUID],
    ) -> Order:
        order = self._state_machine.load(order_id)
        actor = self._state_machine.resolve_actor(actor_id)
        old_status = self._state_machine.apply(order, dto.status, actor, dto.note)
        self._publish_status_changed(order, old_status, actor_id)
        return self._reload(order.id)

    @storage_errors_as_service_error("Failed to cancel order")
    @transaction.atomic
    def cancel_order(
        self,
        order_id: UUID | str,
        actor_id: Optional[UUID],
        note: Optional[str] = None,
    ) -> Order:
        """Cancel an order and put its items back in stock."""
        order = self._state_machine.load(order_id)
        actor = self._state_machine.resolve_actor(actor_id)
        old_status = self._state_machine.apply(
            order, OrderStatus.CANCELLED, actor, note
        )
        logger.info("order.cancelled", order_id=str(order.id), old_status=old_status)
        self._publish_status_changed(order, old_status, actor_id)
        return self._reload(order.id)

    @storage_errors_as_service_error("Failed to process payment")
    @transaction.atomic
    def process_payment(self, order_id: UUID | str, payment_intent_id: str) -> Order:
        """Record a completed payment and move the order to PAID."""
        order = self._state_machine.load(order_id)
        if order.status != OrderStatus.PENDING:
            raise InvalidOrderState(
                f"Only PENDING orders can be paid (status {order.status})."
            )

        order.payment_intent_id = payment_intent_id
        order.payment_status = PaymentStatus.COMPLETED
        old_status = self._state_machine.apply(
            order, OrderStatus.PAID, None, PAYMENT_COMPLETED_NOTE
        )
        logger.info(
            "order.payment_processed",
            order_id=str(order.id),
            payment_intent_id=payment_intent_id,
        )
        self._publish_status_changed(order, old_status, None)
        return self._reload(order.id)

    @storage_errors_as_service_error("Failed to update shipping info")
    @transaction.atomic
    def update_shipping_info(
        self,
        order_id: UUID | str,
        seller_id: UUID,
        dto: UpdateShippingInfoDTO,
    ) -> Order:
        order = self._state_machine.load(order_id)
        seller = self._state_machine.resolve_actor(seller_id)
        if seller.id not in order.seller_ids():
            raise NotOrderSeller("Only a seller on this order can update shipping.")
        if order.status not in SHIPPING_EDITABLE_STATES:
            raise InvalidOrderState(
                f"Shipping info cannot be changed while the order is {order.status}."
            )

        if dto.tracking_number:
            order.tracking_number = dto.tracking_number
        if dto.tracking_url:
            order.tracking_url = dto.tracking_url
        if dto.estimated_delivery is not None:
            order.estimated_delivery = dto.estimated_delivery

        if dto.tracking_number and order.status == OrderStatus.PROCESSING:
            old_status = self._state_machine.apply(
                order, OrderStatus.SHIPPED, seller, TRACKING_ADDED_NOTE
            )
            self._publish_status_changed(order, old_status, seller.id)
        else:
            self._order_repo.save(order)

        logger.info("order.shipping_updated", order_id=str(order.id))
        return self._reload(order.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(
        self,
        order_id: UUID | str,
        viewer_id: Optional[UUID] = None,
        is_admin: bool = False,
    ) -> Order:
        """Retrieve a single order.

        With ``viewer_id`` the order must involve the viewer (buyer or
        seller); otherwise it is reported as missing.

        Raises:
            OrderNotFound: the order does not exist or is not visible.
        """
        return self._visible(
            self._order_repo.get_by_id(str(order_id)), order_id, viewer_id, is_admin
        )

    def get_order_by_number(
        self,
        order_number: str,
        viewer_id: Optional[UUID] = None,
        is_admin: bool = False,
    ) -> Order:
        return self._visible(
            self._order_repo.get_by_number(order_number),
            order_number,
            viewer_id,
            is_admin,
        )

    def get_status_history(
        self,
        order_id: UUID | str,
        viewer_id: Optional[UUID] = None,
        is_admin: bool = False,
    ) -> List[OrderStatusHistory]:
        order = self.get_order(order_id, viewer_id, is_admin)
        return self._order_repo.list_history(order.id)

    def list_customer_orders(self, user_id: UUID) -> List[Order]:
        return self._order_repo.list_for_buyer(user_id)

    def list_artisan_orders(self, seller_id: UUID) -> List[Order]:
        return self._order_repo.list_for_seller(seller_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _visible(
        self,
        order: Optional[Order],
        ref: object,
        viewer_id: Optional[UUID],
        is_admin: bool,
    ) -> Order:
        if not order:
            raise OrderNotFound(f"Order {ref} not found.")
        if viewer_id is None or is_admin:
            return order
        if order.buyer_id != viewer_id and viewer_id not in order.seller_ids():
            raise OrderNotFound(f"Order {ref} not found.")
        return order

    def _reload(self, order_id: UUID) -> Order:
        return self._order_repo.get_by_id(str(order_id))

    def _clear_cart(self, user_id: UUID) -> None:
        """Empty the cart after checkout; a failure here never undoes the order."""
        try:
            removed = self._cart_repo.clear(user_id)
        except DatabaseError:
            logger.warning("order.cart_clear_failed", user_id=str(user_id), exc_info=True)
            return
        logger.info("order.cart_cleared", user_id=str(user_id), removed=removed)

    def _publish_created(self, order: Order) -> None:
        self._publish(
            OrderCreated(
                aggregate_id=order.id,
                order_number=order.order_number,
                buyer_id=order.buyer_id,
                seller_ids=tuple(sorted(order.seller_ids(), key=str)),
                total=str(order.total),
            )
        )

    def _publish_status_changed(
        self, order: Order, old_status: str, actor_id: Optional[UUID]
    ) -> None:
        self._publish(
            OrderStatusChanged(
                aggregate_id=order.id,
                order_number=order.order_number,
                buyer_id=order.buyer_id,
                old_status=old_status,
                new_status=order.status,
                actor_id=actor_id,
                seller_ids=tuple(sorted(order.seller_ids(), key=str)),
            )
        )

    def _publish(self, event) -> None:
        transaction.on_commit(partial(self._bus.publish, event))
