"""Order lifecycle transitions.

Checks run in a fixed order: the order exists, the actor exists, the move
is in ``VALID_TRANSITIONS`` (for every role), the actor is related to the
order, and finally ``ROLE_TRANSITIONS`` allows the move for the part the
actor plays in it.  Admins use the ADMIN row; anyone else uses the
CUSTOMER row as the buyer and the ARTISAN row as a seller, so an artisan
account that bought something cancels it like any customer.  A ``None``
actor is the system and skips the last two checks.

Side effects of entering a status:
- CANCELLED: every item's quantity goes back to stock and a COMPLETED
  payment becomes REFUNDED.
- REFUNDED: payment becomes REFUNDED; stock is untouched.

The caller owns the transaction; the order row is locked before its
status is read, so concurrent cancellations cannot restore stock twice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional
from uuid import UUID

import structlog

from modules.accounts.exceptions import UserNotFound
from modules.accounts.models import UserRole
from modules.orders.constants import ROLE_TRANSITIONS, OrderStatus, PaymentStatus
from modules.orders.exceptions import (
    ForbiddenStatusChange,
    InvalidStatusTransition,
    NotOrderParticipant,
    OrderNotFound,
)

if TYPE_CHECKING:
    from modules.accounts.models import User
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.catalog.ledger import InventoryLedger
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

CANCELLED_NOTE = "Order cancelled"


def default_note(new_status: str) -> str:
    if new_status == OrderStatus.CANCELLED:
        return CANCELLED_NOTE
    return f"Status changed to {new_status}"


class OrderStateMachine:
    def __init__(
        self,
        order_repository: IOrderRepository,
        user_repository: IUserRepository,
        ledger: InventoryLedger,
    ) -> None:
        self._order_repo = order_repository
        self._user_repo = user_repository
        self._ledger = ledger

    def load(self, order_id: UUID | str) -> Order:
        """Lock and return the order, or raise ``OrderNotFound``."""
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def resolve_actor(self, actor_id: Optional[UUID]) -> Optional[User]:
        if actor_id is None:
            return None
        actor = self._user_repo.get_by_id(str(actor_id))
        if not actor:
            raise UserNotFound(f"User {actor_id} not found.")
        return actor

    def transition(
        self,
        order_id: UUID | str,
        new_status: str,
        actor_id: Optional[UUID],
        note: Optional[str] = None,
    ) -> Order:
        order = self.load(order_id)
        actor = self.resolve_actor(actor_id)
        self.apply(order, new_status, actor, note)
        return order

    def apply(
        self,
        order: Order,
        new_status: str,
        actor: Optional[User],
        note: Optional[str] = None,
    ) -> str:
        """Move an already-locked ``order`` to ``new_status``.

        Returns the previous status.
        """
        old_status = order.status
        log = logger.bind(
            order_id=str(order.id),
            current_status=old_status,
            new_status=new_status,
            actor_id=str(actor.id) if actor else None,
        )

        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidStatusTransition(
                f"Cannot transition from {old_status} to {new_status}.",
                details={"from": old_status, "to": new_status},
            )
        if actor is not None:
            self._authorize(order, actor, new_status)

        order.status = new_status
        if new_status == OrderStatus.CANCELLED:
            self._ledger.increment_many(
                (item.product_id, item.quantity) for item in order.items.all()
            )
            if order.payment_status == PaymentStatus.COMPLETED:
                order.payment_status = PaymentStatus.REFUNDED
        elif new_status == OrderStatus.REFUNDED:
            order.payment_status = PaymentStatus.REFUNDED

        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=new_status,
            note=note or default_note(new_status),
            old_status=old_status,
            created_by_id=actor.id if actor else None,
        )

        log.info("order.status_updated")
        return old_status

    def _authorize(self, order: Order, actor: User, new_status: str) -> None:
        rows = [UserRole.ADMIN] if actor.is_admin else self._parts_in(order, actor)
        allowed: set[str] = set()
        for row in rows:
            allowed |= ROLE_TRANSITIONS[row].get(order.status, set())

        if new_status not in allowed:
            logger.warning(
                "order.forbidden_status_change",
                order_id=str(order.id),
                role=actor.role,
                acting_as=rows,
                new_status=new_status,
            )
            raise ForbiddenStatusChange(
                f"A {rows[0].lower()} cannot move an order from "
                f"{order.status} to {new_status}."
            )

    @staticmethod
    def _parts_in(order: Order, actor: User) -> list[str]:
        """``ROLE_TRANSITIONS`` rows open to ``actor`` on this order.

        The buyer gets the customer row and a seller the artisan row,
        whatever role their account carries.
        """
        rows = []
        if actor.id == order.buyer_id:
            rows.append(UserRole.CUSTOMER)
        if actor.id in order.seller_ids():
            rows.append(UserRole.ARTISAN)
        if not rows:
            if actor.role == UserRole.ARTISAN:
                raise NotOrderParticipant("You are not a seller on this order.")
            raise NotOrderParticipant("You are not the buyer of this order.")
        return rows
