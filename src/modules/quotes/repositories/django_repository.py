"""Django ORM implementation of the Quote repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db.models import Q

from modules.quotes.constants import QuoteStatus
from modules.quotes.models import QuoteMessage, QuoteRequest
from modules.quotes.repositories.interfaces import IQuoteRepository

logger = structlog.get_logger(__name__)

_RELATED = ("product", "customer", "artisan")


class QuoteDjangoRepository(IQuoteRepository):
    """Concrete Quote repository backed by Django ORM."""

    def _with_details(self):
        return QuoteRequest.objects.select_related(*_RELATED).prefetch_related(
            "messages"
        )

    def create(self, data: Dict[str, Any]) -> QuoteRequest:
        quote = QuoteRequest.objects.create(**data)
        logger.info("quote.persisted", quote_id=str(quote.id))
        return quote

    def get_by_id(self, id: str) -> Optional[QuoteRequest]:
        """Retrieve a quote with product, parties and messages loaded.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return self._with_details().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[QuoteRequest]:
        try:
            return (
                QuoteRequest.objects.select_for_update(of=("self",))
                .select_related(*_RELATED)
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[QuoteRequest]:
        queryset = self._with_details()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_for_user(self, user_id: UUID) -> List[QuoteRequest]:
        return list(
            self._with_details().filter(Q(customer_id=user_id) | Q(artisan_id=user_id))
        )

    def queryset_for_user(self, user_id: UUID, is_admin: bool = False):
        """Unevaluated queryset for filtered/paginated API listing."""
        queryset = self._with_details()
        if is_admin:
            return queryset
        return queryset.filter(Q(customer_id=user_id) | Q(artisan_id=user_id))

    def save(self, entity: QuoteRequest) -> QuoteRequest:
        entity.save()
        return entity

    def add_message(self, quote_id: UUID, sender_id: UUID, text: str) -> QuoteMessage:
        message = QuoteMessage.objects.create(
            quote_id=quote_id, sender_id=sender_id, message=text
        )
        logger.info(
            "quote.message_added", quote_id=str(quote_id), sender_id=str(sender_id)
        )
        return message

    def expire_pending(self, now: datetime) -> int:
        return QuoteRequest.objects.filter(
            status=QuoteStatus.PENDING, expires_at__lt=now
        ).update(status=QuoteStatus.EXPIRED, updated_at=now)
