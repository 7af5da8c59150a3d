"""Quote repository interface.

Extends ``IRepository[QuoteRequest]`` with row locking, the message
thread and the batch expiry used by the scheduled sweep.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.quotes.models import QuoteMessage, QuoteRequest


class IQuoteRepository(IRepository["QuoteRequest"]):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> QuoteRequest:
        """Insert a new quote request."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[QuoteRequest]:
        """Retrieve a quote with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[QuoteRequest]:
        """List quotes with optional ORM look-ups."""

    @abstractmethod
    def list_for_user(self, user_id: UUID) -> List[QuoteRequest]:
        """Quotes where the user is the customer or the artisan."""

    @abstractmethod
    def add_message(self, quote_id: UUID, sender_id: UUID, text: str) -> QuoteMessage:
        """Append a message to the quote's thread."""

    @abstractmethod
    def expire_pending(self, now: datetime) -> int:
        """Move every PENDING quote with ``expires_at < now`` to EXPIRED."""
