"""Quote negotiation state machine.

``QuoteNegotiator`` owns every status change of a ``QuoteRequest``:

- ``create``: PENDING, customizable products only, never by the seller.
- ``respond_as_artisan``: from PENDING, or from COUNTER_OFFERED while the
  customer's counter-offer is on the table.
- ``respond_as_customer``: from COUNTER_OFFERED while the artisan's
  counter-offer is on the table.
- ``add_message``: either party, PENDING / COUNTER_OFFERED / ACCEPTED.
- ``cancel``: either party, PENDING / COUNTER_OFFERED, ends in REJECTED.
- ``mark_expired``: PENDING past ``expires_at`` becomes EXPIRED.
- ``complete_via_order``: ACCEPTED becomes COMPLETED, only from order
  creation.

Methods run inside the caller's transaction and lock the quote row before
reading its status.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.utils import timezone

from modules.accounts.exceptions import UserNotFound
from modules.catalog.exceptions import ProductNotFound
from modules.quotes.constants import (
    CANCELLABLE_STATUSES,
    MESSAGEABLE_STATUSES,
    MIN_REQUESTED_PRICE_RATIO,
    QuoteAction,
    QuoteParty,
    QuoteStatus,
)
from modules.quotes.exceptions import (
    CannotQuoteOwnProduct,
    InvalidQuoteState,
    MissingCounterOffer,
    NoFinalPrice,
    NoPriceSpecified,
    ProductNotCustomizable,
    QuoteForbidden,
    QuoteNotFound,
    RequestedPriceTooLow,
    UnnecessaryCounterOffer,
)

if TYPE_CHECKING:
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.catalog.repositories.interfaces import IProductRepository
    from modules.quotes.dtos import (
        AddQuoteMessageDTO,
        CreateQuoteRequestDTO,
        RespondToQuoteDTO,
    )
    from modules.quotes.models import QuoteMessage, QuoteRequest
    from modules.quotes.repositories.interfaces import IQuoteRepository

logger = structlog.get_logger(__name__)


class QuoteNegotiator:
    def __init__(
        self,
        quote_repository: IQuoteRepository,
        product_repository: IProductRepository,
        user_repository: IUserRepository,
        default_expiry_days: Optional[int] = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._quote_repo = quote_repository
        self._product_repo = product_repository
        self._user_repo = user_repository
        self._default_expiry_days = (
            default_expiry_days
            if default_expiry_days is not None
            else settings.QUOTE_DEFAULT_EXPIRY_DAYS
        )
        self._clock = clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(self, customer_id: UUID, dto: CreateQuoteRequestDTO) -> QuoteRequest:
        customer = self._user_repo.get_by_id(str(customer_id))
        if not customer:
            raise UserNotFound(f"User {customer_id} not found.")

        product = self._product_repo.get_with_details(str(dto.product_id))
        if not product:
            raise ProductNotFound(f"Product {dto.product_id} not found.")
        if not product.is_customizable:
            raise ProductNotCustomizable(
                "Quotes can only be requested for customizable products."
            )
        if product.seller_id == customer.id:
            raise CannotQuoteOwnProduct(
                "You cannot request a quote for your own product."
            )

        if dto.requested_price is not None:
            minimum = (product.effective_price * MIN_REQUESTED_PRICE_RATIO).quantize(
                Decimal("0.01")
            )
            if dto.requested_price < minimum:
                raise RequestedPriceTooLow(
                    f"Requested price is too low. Minimum acceptable price is {minimum}.",
                    details={"minimum": str(minimum)},
                )

        expiry_days = dto.expires_in_days or self._default_expiry_days
        quote = self._quote_repo.create(
            {
                "product_id": product.id,
                "customer_id": customer.id,
                "artisan_id": product.seller_id,
                "requested_price": dto.requested_price,
                "specifications": dto.specifications or "",
                "status": QuoteStatus.PENDING,
                "expires_at": self._clock() + timedelta(days=expiry_days),
            }
        )
        if dto.specifications:
            self._quote_repo.add_message(quote.id, customer.id, dto.specifications)

        logger.info(
            "quote.created",
            quote_id=str(quote.id),
            customer_id=str(customer.id),
            product_id=str(product.id),
        )
        return quote

    # ------------------------------------------------------------------
    # Negotiation
    # ------------------------------------------------------------------

    def respond_as_artisan(
        self, quote_id: UUID, artisan_id: UUID, dto: RespondToQuoteDTO
    ) -> QuoteRequest:
        """Seller's reply to the original request or to a customer counter-offer."""
        quote = self._lock(quote_id)
        if quote.artisan_id != artisan_id:
            raise QuoteForbidden(
                "Only the seller of this product can respond to the quote request."
            )
        awaiting_artisan = quote.status == QuoteStatus.PENDING or (
            quote.status == QuoteStatus.COUNTER_OFFERED
            and quote.last_offer_by == QuoteParty.CUSTOMER
        )
        if not awaiting_artisan:
            raise InvalidQuoteState(
                f"Cannot respond to a quote in status {quote.status}."
            )
        return self._apply_response(quote, artisan_id, QuoteParty.ARTISAN, dto)

    def respond_as_customer(
        self, quote_id: UUID, customer_id: UUID, dto: RespondToQuoteDTO
    ) -> QuoteRequest:
        """Customer's reply to the artisan's counter-offer."""
        quote = self._lock(quote_id)
        if quote.customer_id != customer_id:
            raise QuoteForbidden(
                "Only the customer who requested the quote can answer its counter-offer."
            )
        awaiting_customer = (
            quote.status == QuoteStatus.COUNTER_OFFERED
            and quote.last_offer_by == QuoteParty.ARTISAN
        )
        if not awaiting_customer:
            raise InvalidQuoteState(
                f"There is no artisan counter-offer to answer (status {quote.status})."
            )
        return self._apply_response(quote, customer_id, QuoteParty.CUSTOMER, dto)

    def _apply_response(
        self,
        quote: QuoteRequest,
        responder_id: UUID,
        party: str,
        dto: RespondToQuoteDTO,
    ) -> QuoteRequest:
        log = logger.bind(
            quote_id=str(quote.id), party=party, action=dto.action, from_status=quote.status
        )
        if dto.action != QuoteAction.COUNTER and dto.counter_offer is not None:
            raise UnnecessaryCounterOffer(
                "Counter offer should only be provided when action is counter."
            )

        if dto.action == QuoteAction.ACCEPT:
            price = (
                quote.counter_offer
                if quote.counter_offer is not None
                else quote.requested_price
            )
            if price is None:
                raise NoPriceSpecified(
                    "Cannot accept a quote without a requested price or counter offer."
                )
            quote.final_price = price
            quote.status = QuoteStatus.ACCEPTED
        elif dto.action == QuoteAction.REJECT:
            quote.status = QuoteStatus.REJECTED
        else:
            if dto.counter_offer is None:
                raise MissingCounterOffer(
                    "Counter offer amount is required and must be greater than 0."
                )
            quote.counter_offer = dto.counter_offer
            quote.last_offer_by = party
            quote.status = QuoteStatus.COUNTER_OFFERED

        self._quote_repo.save(quote)
        if dto.message:
            self._quote_repo.add_message(quote.id, responder_id, dto.message)

        log.info("quote.responded", to_status=quote.status)
        return quote

    def add_message(
        self, quote_id: UUID, user_id: UUID, dto: AddQuoteMessageDTO
    ) -> QuoteMessage:
        quote = self._lock(quote_id)
        if not quote.is_party(user_id):
            raise QuoteForbidden(
                "You do not have permission to add messages to this quote."
            )
        if quote.status not in MESSAGEABLE_STATUSES:
            raise InvalidQuoteState(
                f"Cannot add messages to a quote in status {quote.status}."
            )
        return self._quote_repo.add_message(quote.id, user_id, dto.message)

    def cancel(
        self, quote_id: UUID, user_id: UUID, reason: Optional[str] = None
    ) -> QuoteRequest:
        quote = self._lock(quote_id)
        if not quote.is_party(user_id):
            raise QuoteForbidden("You can only cancel your own quote requests.")
        if quote.status not in CANCELLABLE_STATUSES:
            raise InvalidQuoteState(f"Cannot cancel quote in {quote.status} status.")

        quote.status = QuoteStatus.REJECTED
        self._quote_repo.save(quote)
        if reason:
            self._quote_repo.add_message(quote.id, user_id, f"Quote cancelled: {reason}")

        logger.info("quote.cancelled", quote_id=str(quote.id), user_id=str(user_id))
        return quote

    # ------------------------------------------------------------------
    # Expiry and completion
    # ------------------------------------------------------------------

    def mark_expired(self) -> int:
        """Expire PENDING quotes whose deadline has passed.

        COUNTER_OFFERED quotes are left alone even past ``expires_at``.
        """
        count = self._quote_repo.expire_pending(self._clock())
        if count:
            logger.info("quote.expired_batch", count=count)
        return count

    def load_accepted_for_order(self, quote_id: UUID, customer_id: UUID) -> QuoteRequest:
        """Lock a quote that ``customer_id`` may turn into an order."""
        quote = self._lock(quote_id)
        if quote.customer_id != customer_id:
            raise QuoteForbidden("Only the quote's customer can order it.")
        if quote.status != QuoteStatus.ACCEPTED:
            raise InvalidQuoteState(
                f"Only ACCEPTED quotes can be ordered (status {quote.status})."
            )
        if quote.final_price is None:
            raise NoFinalPrice("Quote has no final price.")
        return quote

    def complete_via_order(self, quote: QuoteRequest) -> QuoteRequest:
        if quote.status != QuoteStatus.ACCEPTED:
            raise InvalidQuoteState(
                f"Only ACCEPTED quotes can be completed (status {quote.status})."
            )
        quote.status = QuoteStatus.COMPLETED
        self._quote_repo.save(quote)
        logger.info("quote.completed", quote_id=str(quote.id))
        return quote

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock(self, quote_id: UUID) -> QuoteRequest:
        quote = self._quote_repo.get_for_update(str(quote_id))
        if not quote:
            raise QuoteNotFound(f"Quote request {quote_id} not found.")
        return quote
