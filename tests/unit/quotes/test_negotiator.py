"""Unit tests for QuoteNegotiator.

Covers:
- create: customizable products only, never the seller's own, minimum price
- artisan / customer turn-taking while negotiating
- accept / reject / counter outcomes and their validation errors
- messages and cancellation by either party
- expiry of overdue PENDING quotes
- hand-over to order creation (load_accepted_for_order / complete_via_order)
"""

from __future__ import annotations

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from django.utils import timezone

from modules.accounts.exceptions import UserNotFound
from modules.accounts.repositories import UserDjangoRepository
from modules.catalog.exceptions import ProductNotFound
from modules.catalog.repositories import ProductDjangoRepository
from modules.quotes.constants import QuoteAction, QuoteParty, QuoteStatus
from modules.quotes.dtos import (
    AddQuoteMessageDTO,
    CreateQuoteRequestDTO,
    RespondToQuoteDTO,
)
from modules.quotes.exceptions import (
    CannotQuoteOwnProduct,
    InvalidQuoteState,
    MissingCounterOffer,
    NoPriceSpecified,
    ProductNotCustomizable,
    QuoteForbidden,
    QuoteNotFound,
    RequestedPriceTooLow,
    UnnecessaryCounterOffer,
)
from modules.quotes.models import QuoteMessage
from modules.quotes.negotiator import QuoteNegotiator
from modules.quotes.repositories import QuoteDjangoRepository

pytestmark = pytest.mark.unit

FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=dt_timezone.utc)


def _negotiator(clock=timezone.now, default_expiry_days=7):
    return QuoteNegotiator(
        quote_repository=QuoteDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        user_repository=UserDjangoRepository(),
        default_expiry_days=default_expiry_days,
        clock=clock,
    )


@pytest.fixture()
def negotiator():
    return _negotiator()


@pytest.fixture()
def quote(negotiator, customer, custom_product):
    return negotiator.create(
        customer.id,
        CreateQuoteRequestDTO(
            product_id=custom_product.id,
            requested_price=Decimal("60.00"),
            specifications="Engraved with our initials",
        ),
    )


def _counter(amount: str, message: str | None = None) -> RespondToQuoteDTO:
    return RespondToQuoteDTO(
        action=QuoteAction.COUNTER, counter_offer=Decimal(amount), message=message
    )


ACCEPT = RespondToQuoteDTO(action=QuoteAction.ACCEPT)
REJECT = RespondToQuoteDTO(action=QuoteAction.REJECT)


# ===========================================================================
# create
# ===========================================================================


class TestCreate:
    def test_opens_pending_quote_with_seller_as_artisan(
        self, customer, artisan, custom_product
    ):
        quote = _negotiator(clock=lambda: FIXED_NOW).create(
            customer.id, CreateQuoteRequestDTO(product_id=custom_product.id)
        )

        assert quote.status == QuoteStatus.PENDING
        assert quote.artisan_id == artisan.id
        assert quote.customer_id == customer.id
        assert quote.final_price is None
        assert quote.expires_at == FIXED_NOW + timedelta(days=7)

    def test_expiry_can_be_overridden(self, customer, custom_product):
        quote = _negotiator(clock=lambda: FIXED_NOW).create(
            customer.id,
            CreateQuoteRequestDTO(product_id=custom_product.id, expires_in_days=2),
        )

        assert quote.expires_at == FIXED_NOW + timedelta(days=2)

    def test_specifications_become_first_message(self, quote, customer):
        [message] = QuoteMessage.objects.filter(quote_id=quote.id)

        assert message.sender_id == customer.id
        assert message.message == "Engraved with our initials"

    def test_no_message_without_specifications(self, negotiator, customer, custom_product):
        quote = negotiator.create(
            customer.id, CreateQuoteRequestDTO(product_id=custom_product.id)
        )

        assert not QuoteMessage.objects.filter(quote_id=quote.id).exists()

    def test_requires_customizable_product(self, negotiator, customer, product):
        with pytest.raises(ProductNotCustomizable):
            negotiator.create(customer.id, CreateQuoteRequestDTO(product_id=product.id))

    def test_seller_cannot_quote_own_product(self, negotiator, artisan, custom_product):
        with pytest.raises(CannotQuoteOwnProduct):
            negotiator.create(
                artisan.id, CreateQuoteRequestDTO(product_id=custom_product.id)
            )

    def test_price_below_half_of_listing_is_refused(
        self, negotiator, customer, custom_product
    ):
        with pytest.raises(RequestedPriceTooLow) as exc_info:
            negotiator.create(
                customer.id,
                CreateQuoteRequestDTO(
                    product_id=custom_product.id, requested_price=Decimal("49.99")
                ),
            )

        assert exc_info.value.details == {"minimum": "50.00"}

    def test_price_at_half_of_listing_is_accepted(
        self, negotiator, customer, custom_product
    ):
        quote = negotiator.create(
            customer.id,
            CreateQuoteRequestDTO(
                product_id=custom_product.id, requested_price=Decimal("50.00")
            ),
        )

        assert quote.requested_price == Decimal("50.00")

    def test_unknown_product(self, negotiator, customer):
        with pytest.raises(ProductNotFound):
            negotiator.create(customer.id, CreateQuoteRequestDTO(product_id=uuid4()))

    def test_unknown_customer(self, negotiator, custom_product):
        with pytest.raises(UserNotFound):
            negotiator.create(
                uuid4(), CreateQuoteRequestDTO(product_id=custom_product.id)
            )


# ===========================================================================
# Artisan response
# ===========================================================================


class TestRespondAsArtisan:
    def test_accept_uses_requested_price(self, negotiator, quote, artisan):
        quote = negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)

        assert quote.status == QuoteStatus.ACCEPTED
        assert quote.final_price == Decimal("60.00")

    def test_accept_without_any_price(self, negotiator, customer, artisan, custom_product):
        quote = negotiator.create(
            customer.id, CreateQuoteRequestDTO(product_id=custom_product.id)
        )

        with pytest.raises(NoPriceSpecified):
            negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)

    def test_reject(self, negotiator, quote, artisan):
        quote = negotiator.respond_as_artisan(quote.id, artisan.id, REJECT)

        assert quote.status == QuoteStatus.REJECTED
        assert quote.final_price is None

    def test_counter(self, negotiator, quote, artisan):
        quote = negotiator.respond_as_artisan(quote.id, artisan.id, _counter("80.00"))

        assert quote.status == QuoteStatus.COUNTER_OFFERED
        assert quote.counter_offer == Decimal("80.00")
        assert quote.last_offer_by == QuoteParty.ARTISAN

    def test_counter_requires_amount(self, negotiator, quote, artisan):
        with pytest.raises(MissingCounterOffer):
            negotiator.respond_as_artisan(
                quote.id, artisan.id, RespondToQuoteDTO(action=QuoteAction.COUNTER)
            )

    def test_counter_amount_only_with_counter_action(self, negotiator, quote, artisan):
        with pytest.raises(UnnecessaryCounterOffer):
            negotiator.respond_as_artisan(
                quote.id,
                artisan.id,
                RespondToQuoteDTO(
                    action=QuoteAction.ACCEPT, counter_offer=Decimal("70.00")
                ),
            )

    def test_only_seller_may_respond(self, negotiator, quote, other_artisan):
        with pytest.raises(QuoteForbidden):
            negotiator.respond_as_artisan(quote.id, other_artisan.id, ACCEPT)

    def test_cannot_answer_own_counter_offer(self, negotiator, quote, artisan):
        negotiator.respond_as_artisan(quote.id, artisan.id, _counter("80.00"))

        with pytest.raises(InvalidQuoteState):
            negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)

    def test_answers_customer_counter_offer(self, negotiator, quote, artisan, customer):
        negotiator.respond_as_artisan(quote.id, artisan.id, _counter("80.00"))
        negotiator.respond_as_customer(quote.id, customer.id, _counter("70.00"))

        quote = negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)

        assert quote.status == QuoteStatus.ACCEPTED
        assert quote.final_price == Decimal("70.00")

    def test_message_is_appended(self, negotiator, quote, artisan):
        negotiator.respond_as_artisan(
            quote.id, artisan.id, _counter("80.00", message="Walnut costs more")
        )

        last = QuoteMessage.objects.filter(quote_id=quote.id).order_by("created_at").last()
        assert last.sender_id == artisan.id
        assert last.message == "Walnut costs more"

    def test_unknown_quote(self, negotiator, artisan):
        with pytest.raises(QuoteNotFound):
            negotiator.respond_as_artisan(uuid4(), artisan.id, ACCEPT)

    def test_terminal_quote_cannot_be_answered(self, negotiator, quote, artisan):
        negotiator.respond_as_artisan(quote.id, artisan.id, REJECT)

        with pytest.raises(InvalidQuoteState):
            negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)


# ===========================================================================
# Customer response
# ===========================================================================


class TestRespondAsCustomer:
    @pytest.fixture()
    def countered(self, negotiator, quote, artisan):
        return negotiator.respond_as_artisan(quote.id, artisan.id, _counter("80.00"))

    def test_accept_uses_counter_offer(self, negotiator, countered, customer):
        quote = negotiator.respond_as_customer(countered.id, customer.id, ACCEPT)

        assert quote.status == QuoteStatus.ACCEPTED
        assert quote.final_price == Decimal("80.00")

    def test_counter_passes_turn_to_artisan(self, negotiator, countered, customer):
        quote = negotiator.respond_as_customer(
            countered.id, customer.id, _counter("70.00")
        )

        assert quote.status == QuoteStatus.COUNTER_OFFERED
        assert quote.last_offer_by == QuoteParty.CUSTOMER
        assert quote.counter_offer == Decimal("70.00")

    def test_reject(self, negotiator, countered, customer):
        quote = negotiator.respond_as_customer(countered.id, customer.id, REJECT)

        assert quote.status == QuoteStatus.REJECTED

    def test_only_requesting_customer(self, negotiator, countered, other_customer):
        with pytest.raises(QuoteForbidden):
            negotiator.respond_as_customer(countered.id, other_customer.id, ACCEPT)

    def test_nothing_to_answer_while_pending(self, negotiator, quote, customer):
        with pytest.raises(InvalidQuoteState):
            negotiator.respond_as_customer(quote.id, customer.id, ACCEPT)

    def test_cannot_answer_own_counter_offer(self, negotiator, countered, customer):
        negotiator.respond_as_customer(countered.id, customer.id, _counter("70.00"))

        with pytest.raises(InvalidQuoteState):
            negotiator.respond_as_customer(countered.id, customer.id, ACCEPT)


# ===========================================================================
# Messages and cancellation
# ===========================================================================


class TestAddMessage:
    def test_either_party_can_post(self, negotiator, quote, customer, artisan):
        negotiator.add_message(quote.id, artisan.id, AddQuoteMessageDTO(message="Hi"))
        message = negotiator.add_message(
            quote.id, customer.id, AddQuoteMessageDTO(message="Hello")
        )

        assert message.message == "Hello"
        assert QuoteMessage.objects.filter(quote_id=quote.id).count() == 3

    def test_message_does_not_change_status(self, negotiator, quote, artisan):
        negotiator.add_message(quote.id, artisan.id, AddQuoteMessageDTO(message="Hi"))

        quote.refresh_from_db()
        assert quote.status == QuoteStatus.PENDING

    def test_allowed_on_accepted_quote(self, negotiator, quote, artisan, customer):
        negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)

        message = negotiator.add_message(
            quote.id, customer.id, AddQuoteMessageDTO(message="Thanks")
        )

        assert message.quote_id == quote.id

    def test_stranger_cannot_post(self, negotiator, quote, other_customer):
        with pytest.raises(QuoteForbidden):
            negotiator.add_message(
                quote.id, other_customer.id, AddQuoteMessageDTO(message="Hi")
            )

    def test_closed_quote_rejects_messages(self, negotiator, quote, artisan):
        negotiator.respond_as_artisan(quote.id, artisan.id, REJECT)

        with pytest.raises(InvalidQuoteState):
            negotiator.add_message(quote.id, artisan.id, AddQuoteMessageDTO(message="Hi"))

    def test_blank_message_rejected_by_dto(self):
        with pytest.raises(ValueError):
            AddQuoteMessageDTO(message="   ")


class TestCancel:
    def test_customer_cancels_with_reason(self, negotiator, quote, customer):
        quote = negotiator.cancel(quote.id, customer.id, "Found another maker")

        assert quote.status == QuoteStatus.REJECTED
        assert QuoteMessage.objects.filter(
            quote_id=quote.id, message="Quote cancelled: Found another maker"
        ).exists()

    def test_artisan_can_cancel_counter_offered(self, negotiator, quote, artisan):
        negotiator.respond_as_artisan(quote.id, artisan.id, _counter("80.00"))

        quote = negotiator.cancel(quote.id, artisan.id)

        assert quote.status == QuoteStatus.REJECTED

    def test_stranger_cannot_cancel(self, negotiator, quote, other_customer):
        with pytest.raises(QuoteForbidden):
            negotiator.cancel(quote.id, other_customer.id)

    def test_accepted_quote_cannot_be_cancelled(self, negotiator, quote, artisan, customer):
        negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)

        with pytest.raises(InvalidQuoteState):
            negotiator.cancel(quote.id, customer.id)


# ===========================================================================
# Expiry and order hand-over
# ===========================================================================


class TestMarkExpired:
    def test_expires_overdue_pending_quotes_once(self, customer, custom_product):
        past = timezone.now() - timedelta(days=10)
        quote = _negotiator(clock=lambda: past).create(
            customer.id, CreateQuoteRequestDTO(product_id=custom_product.id)
        )
        negotiator = _negotiator()

        assert negotiator.mark_expired() == 1
        assert negotiator.mark_expired() == 0
        quote.refresh_from_db()
        assert quote.status == QuoteStatus.EXPIRED

    def test_leaves_current_quotes_alone(self, negotiator, quote):
        assert negotiator.mark_expired() == 0
        quote.refresh_from_db()
        assert quote.status == QuoteStatus.PENDING

    def test_counter_offered_quotes_do_not_expire(self, customer, artisan, custom_product):
        past = timezone.now() - timedelta(days=10)
        old = _negotiator(clock=lambda: past)
        quote = old.create(
            customer.id, CreateQuoteRequestDTO(product_id=custom_product.id)
        )
        old.respond_as_artisan(quote.id, artisan.id, _counter("90.00"))

        assert _negotiator().mark_expired() == 0
        quote.refresh_from_db()
        assert quote.status == QuoteStatus.COUNTER_OFFERED


class TestOrderHandOver:
    def test_load_accepted_for_order(self, negotiator, quote, artisan, customer):
        negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)

        loaded = negotiator.load_accepted_for_order(quote.id, customer.id)

        assert loaded.id == quote.id
        assert loaded.final_price == Decimal("60.00")

    def test_pending_quote_cannot_be_ordered(self, negotiator, quote, customer):
        with pytest.raises(InvalidQuoteState):
            negotiator.load_accepted_for_order(quote.id, customer.id)

    def test_only_quote_customer_can_order(self, negotiator, quote, artisan, other_customer):
        negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)

        with pytest.raises(QuoteForbidden):
            negotiator.load_accepted_for_order(quote.id, other_customer.id)

    def test_unknown_quote(self, negotiator, customer):
        with pytest.raises(QuoteNotFound):
            negotiator.load_accepted_for_order(uuid4(), customer.id)

    def test_complete_via_order(self, negotiator, quote, artisan, customer):
        negotiator.respond_as_artisan(quote.id, artisan.id, ACCEPT)
        loaded = negotiator.load_accepted_for_order(quote.id, customer.id)

        completed = negotiator.complete_via_order(loaded)

        assert completed.status == QuoteStatus.COMPLETED
        assert completed.final_price == Decimal("60.00")

    def test_complete_requires_accepted(self, negotiator, quote):
        with pytest.raises(InvalidQuoteState):
            negotiator.complete_via_order(quote)
