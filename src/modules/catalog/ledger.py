"""Stock bookkeeping for the order lifecycle.

``decrement`` checks availability and subtracts in a single conditional
``UPDATE ... WHERE quantity >= qty``, so two concurrent checkouts can never
both take the last unit.  ``increment`` is unconditional.

Neither call is idempotent and neither opens its own transaction: both run
inside the caller's ``transaction.atomic`` block.  Order creation calls
``decrement`` once per item; entering CANCELLED calls ``increment`` once
per item.
"""

from __future__ import annotations

from typing import Iterable, Tuple
from uuid import UUID

import structlog
from django.db.models import F

from modules.catalog.exceptions import OutOfStock
from modules.catalog.models import Product

logger = structlog.get_logger(__name__)


class InventoryLedger:
    """Atomic stock adjustments on ``Product.quantity``."""

    def decrement(self, product_id: UUID, qty: int) -> None:
        """Take ``qty`` units or raise ``OutOfStock`` (aborting the transaction)."""
        updated = Product.objects.filter(id=product_id, quantity__gte=qty).update(
            quantity=F("quantity") - qty
        )
        if updated == 0:
            logger.warning(
                "inventory.decrement_rejected",
                product_id=str(product_id),
                quantity=qty,
            )
            raise OutOfStock(
                f"Product {product_id} does not have {qty} unit(s) available.",
                details={"product_id": str(product_id), "requested": qty},
            )
        logger.info(
            "inventory.decremented", product_id=str(product_id), quantity=qty
        )

    def increment(self, product_id: UUID, qty: int) -> None:
        """Return ``qty`` units to stock."""
        Product.objects.filter(id=product_id).update(quantity=F("quantity") + qty)
        logger.info(
            "inventory.incremented", product_id=str(product_id), quantity=qty
        )

    def decrement_many(self, lines: Iterable[Tuple[UUID, int]]) -> None:
        """Decrement several products, always in product-id order."""
        for product_id, qty in sorted(lines, key=lambda line: str(line[0])):
            self.decrement(product_id, qty)

    def increment_many(self, lines: Iterable[Tuple[UUID, int]]) -> None:
        """Restore several products, always in product-id order."""
        for product_id, qty in sorted(lines, key=lambda line: str(line[0])):
            self.increment(product_id, qty)
