"""Human-readable order numbers.

Format: ``<PREFIX>-<YYMMDD>-<sequence>``, e.g. ``AC-261019-0007``.  The
sequence comes from a per-day ``OrderNumberSequence`` row that is locked
and incremented inside the caller's transaction, so concurrent checkouts
never draw the same value.  A candidate that already exists on an order
(e.g. after a manual data fix) is skipped; the unique constraint on
``Order.order_number`` stays the final guard.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Callable, Optional

import structlog
from django.conf import settings
from django.db.models import F
from django.utils import timezone

from modules.orders.constants import (
    ORDER_NUMBER_MAX_RETRIES,
    ORDER_NUMBER_SEQUENCE_WIDTH,
)
from modules.orders.exceptions import OrderNumberGenerationFailed
from modules.orders.models import OrderNumberSequence

if TYPE_CHECKING:
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderNumberGenerator:
    def __init__(
        self,
        order_repository: IOrderRepository,
        prefix: Optional[str] = None,
        max_retries: int = ORDER_NUMBER_MAX_RETRIES,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._order_repo = order_repository
        self._prefix = prefix or settings.ORDER_NUMBER_PREFIX
        self._max_retries = max_retries
        self._clock = clock

    def next_number(self) -> str:
        """Return an unused order number or raise ``OrderNumberGenerationFailed``."""
        day = timezone.localdate(self._clock())
        for attempt in range(1, self._max_retries + 1):
            candidate = self.format(day, self._next_sequence(day))
            if not self._order_repo.number_exists(candidate):
                return candidate
            logger.warning(
                "order_number.collision", candidate=candidate, attempt=attempt
            )

        logger.error("order_number.exhausted", attempts=self._max_retries)
        raise OrderNumberGenerationFailed(
            "Could not generate a unique order number. Please retry."
        )

    def format(self, day: date, sequence: int) -> str:
        return f"{self._prefix}-{day:%y%m%d}-{sequence:0{ORDER_NUMBER_SEQUENCE_WIDTH}d}"

    def _next_sequence(self, day: date) -> int:
        OrderNumberSequence.objects.get_or_create(day=day)
        counter = OrderNumberSequence.objects.select_for_update().get(day=day)
        OrderNumberSequence.objects.filter(pk=counter.pk).update(
            last_value=F("last_value") + 1
        )
        counter.refresh_from_db(fields=["last_value"])
        return counter.last_value
