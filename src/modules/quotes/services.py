"""Quote service layer (Use Cases).

Each command is one unit of work around ``QuoteNegotiator``.  Events are
published to the in-process bus only after the transaction commits.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, List
from uuid import UUID

import structlog
from django.db import transaction

from modules.core.exceptions import storage_errors_as_service_error
from modules.quotes.constants import QuoteAction
from modules.quotes.events import (
    QuoteCancelled,
    QuoteMessagePosted,
    QuoteRequested,
    QuoteResponded,
)
from modules.quotes.exceptions import QuoteNotFound

if TYPE_CHECKING:
    from modules.quotes.dtos import (
        AddQuoteMessageDTO,
        CancelQuoteDTO,
        CreateQuoteRequestDTO,
        RespondToQuoteDTO,
    )
    from modules.quotes.models import QuoteMessage, QuoteRequest
    from modules.quotes.negotiator import QuoteNegotiator
    from modules.quotes.repositories.interfaces import IQuoteRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


class QuoteService:
    """Application service for quote negotiation use-cases."""

    def __init__(
        self,
        quote_repository: IQuoteRepository,
        negotiator: QuoteNegotiator,
        event_bus: IEventBus,
    ) -> None:
        self._quote_repo = quote_repository
        self._negotiator = negotiator
        self._bus = event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @storage_errors_as_service_error("Failed to create quote request")
    @transaction.atomic
    def create_quote_request(
        self, customer_id: UUID, dto: CreateQuoteRequestDTO
    ) -> QuoteRequest:
        quote = self._negotiator.create(customer_id, dto)
        self._publish(
            QuoteRequested(
                aggregate_id=quote.id,
                customer_id=quote.customer_id,
                artisan_id=quote.artisan_id,
                product_name=quote.product.name,
            )
        )
        return self._reload(quote.id)

    @storage_errors_as_service_error("Failed to respond to quote request")
    @transaction.atomic
    def respond_to_quote_request(
        self, quote_id: UUID, artisan_id: UUID, dto: RespondToQuoteDTO
    ) -> QuoteRequest:
        """Artisan accepts, rejects or counters."""
        quote = self._negotiator.respond_as_artisan(quote_id, artisan_id, dto)
        self._publish_response(quote, artisan_id, dto.action)
        return self._reload(quote.id)

    @storage_errors_as_service_error("Failed to respond to counter offer")
    @transaction.atomic
    def respond_to_counter_offer(
        self, quote_id: UUID, customer_id: UUID, dto: RespondToQuoteDTO
    ) -> QuoteRequest:
        """Customer accepts, rejects or counters the artisan's offer."""
        quote = self._negotiator.respond_as_customer(quote_id, customer_id, dto)
        self._publish_response(quote, customer_id, dto.action)
        return self._reload(quote.id)

    @storage_errors_as_service_error("Failed to add message to quote")
    @transaction.atomic
    def add_message_to_quote(
        self, quote_id: UUID, user_id: UUID, dto: AddQuoteMessageDTO
    ) -> QuoteMessage:
        message = self._negotiator.add_message(quote_id, user_id, dto)
        quote = message.quote
        self._publish(
            QuoteMessagePosted(
                aggregate_id=quote.id,
                sender_id=user_id,
                recipient_id=quote.counterpart_of(user_id),
            )
        )
        return message

    @storage_errors_as_service_error("Failed to cancel quote request")
    @transaction.atomic
    def cancel_quote_request(
        self, quote_id: UUID, user_id: UUID, dto: CancelQuoteDTO
    ) -> QuoteRequest:
        quote = self._negotiator.cancel(quote_id, user_id, dto.reason)
        self._publish(
            QuoteCancelled(
                aggregate_id=quote.id,
                cancelled_by=user_id,
                recipient_id=quote.counterpart_of(user_id),
            )
        )
        return self._reload(quote.id)

    @storage_errors_as_service_error("Failed to expire quote requests")
    @transaction.atomic
    def cleanup_expired_quotes(self) -> int:
        """Expire overdue PENDING quotes; returns how many changed."""
        expired = self._negotiator.mark_expired()
        logger.info("quote.cleanup_finished", expired=expired)
        return expired

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_quote_request(
        self, quote_id: UUID | str, user_id: UUID, is_admin: bool = False
    ) -> QuoteRequest:
        """Fetch a quote visible to ``user_id``.

        Quotes the user is not a party to are reported as missing.
        """
        quote = self._quote_repo.get_by_id(str(quote_id))
        if not quote or not (is_admin or quote.is_party(user_id)):
            raise QuoteNotFound(f"Quote request {quote_id} not found.")
        return quote

    def list_quote_requests(self, user_id: UUID) -> List[QuoteRequest]:
        return self._quote_repo.list_for_user(user_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reload(self, quote_id: UUID) -> QuoteRequest:
        return self._quote_repo.get_by_id(str(quote_id))

    def _publish_response(
        self, quote: QuoteRequest, responder_id: UUID, action: str
    ) -> None:
        price = quote.final_price if action == QuoteAction.ACCEPT else quote.counter_offer
        self._publish(
            QuoteResponded(
                aggregate_id=quote.id,
                responder_id=responder_id,
                recipient_id=quote.counterpart_of(responder_id),
                action=str(action),
                status=quote.status,
                price=str(price) if price is not None else None,
            )
        )

    def _publish(self, event) -> None:
        transaction.on_commit(partial(self._bus.publish, event))
