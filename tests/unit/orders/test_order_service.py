"""Unit tests for OrderService.

Covers:
- create_order_from_cart: totals, stock, history, cart cleared, event,
  full rollback when stock runs out mid-checkout
- create_order_from_quote: negotiated price, quote completed, single use
- process_payment: PENDING -> PAID as the system actor
- cancel_order: stock restored exactly once
- update_shipping_info: seller only, PROCESSING/SHIPPED only, auto-ship
- query visibility for buyer, sellers, strangers and admins
- storage failures surface as ServiceError
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from django.db import DatabaseError

from modules.cart.exceptions import CartValidationFailed
from modules.cart.models import CartItem
from modules.cart.validators import CartValidator
from modules.catalog.exceptions import OutOfStock
from modules.catalog.models import Product
from modules.core.exceptions import ServiceError
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.dtos import (
    CreateOrderFromCartDTO,
    CreateOrderFromQuoteDTO,
    UpdateOrderStatusDTO,
    UpdateShippingInfoDTO,
)
from modules.orders.events import OrderCreated, OrderStatusChanged
from modules.orders.exceptions import (
    InvalidOrderState,
    InvalidStatusTransition,
    NotOrderSeller,
    OrderNotFound,
)
from modules.orders.models import Order, OrderNumberSequence
from modules.orders.repositories import OrderDjangoRepository
from modules.quotes.constants import QuoteAction, QuoteStatus
from modules.quotes.dtos import CreateQuoteRequestDTO, RespondToQuoteDTO
from modules.quotes.exceptions import InvalidQuoteState

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def checkout(order_service, customer, address):
    def _checkout(*lines):
        for line_product, quantity in lines:
            CartItem.objects.create(user=customer, product=line_product, quantity=quantity)
        return order_service.create_order_from_cart(
            customer.id, CreateOrderFromCartDTO(address_id=address.id)
        )

    return _checkout


@pytest.fixture()
def order(checkout, product):
    return checkout((product, 2))


@pytest.fixture()
def processing_order(order_service, order, artisan):
    order_service.process_payment(order.id, "pi_123")
    return order_service.update_order_status(
        order.id, UpdateOrderStatusDTO(status="PROCESSING"), artisan.id
    )


# ===========================================================================
# create_order_from_cart
# ===========================================================================


class TestCreateOrderFromCart:
    def test_prices_order(self, order):
        assert order.subtotal == Decimal("200.00")
        assert order.tax == Decimal("20.00")
        assert order.shipping_cost == Decimal("0.00")
        assert order.total == Decimal("220.00")

    def test_order_number_format(self, order):
        assert re.fullmatch(r"AC-\d{6}-\d{4}", order.order_number)

    def test_takes_stock(self, order, product):
        product.refresh_from_db()
        assert product.quantity == 8

    def test_clears_cart(self, order, customer):
        assert not CartItem.objects.filter(user=customer).exists()

    def test_returns_order_with_items_and_history(self, order):
        assert len(order.items.all()) == 1
        assert [h.note for h in order.status_history.all()] == ["Order created"]

    def test_multi_seller_order(
        self, checkout, make_product, artisan, other_artisan
    ):
        order = checkout(
            (make_product(name="Vase"), 1),
            (make_product(name="Throw", seller=other_artisan), 1),
        )

        assert order.seller_ids() == {artisan.id, other_artisan.id}

    def test_publishes_order_created_after_commit(
        self, checkout, bus, product, customer, artisan,
        django_capture_on_commit_callbacks,
    ):
        with django_capture_on_commit_callbacks(execute=True):
            order = checkout((product, 1))

        [event] = bus.events
        assert isinstance(event, OrderCreated)
        assert event.aggregate_id == order.id
        assert event.buyer_id == customer.id
        assert event.seller_ids == (artisan.id,)
        assert event.total == "110.00"

    def test_invalid_cart_creates_nothing(self, checkout, make_product, customer):
        product = make_product(quantity=1)

        with pytest.raises(CartValidationFailed):
            checkout((product, 2))

        assert not Order.objects.exists()
        assert CartItem.objects.filter(user=customer).count() == 1
        product.refresh_from_db()
        assert product.quantity == 1

    def test_stock_lost_after_validation_rolls_everything_back(
        self, checkout, make_product, customer, bus, monkeypatch
    ):
        first, second = sorted(
            (make_product(name="Vase", quantity=5), make_product(name="Bowl", quantity=5)),
            key=lambda p: str(p.id),
        )
        validate = CartValidator.validate

        def validate_then_sell_out(self, user_id):
            result = validate(self, user_id)
            # Stock is taken in product-id order, so ``first`` is already
            # decremented when ``second`` comes up short.
            Product.objects.filter(id=second.id).update(quantity=1)
            return result

        monkeypatch.setattr(CartValidator, "validate", validate_then_sell_out)

        with pytest.raises(OutOfStock) as exc_info:
            checkout((first, 1), (second, 2))

        assert exc_info.value.details == {"product_id": str(second.id), "requested": 2}
        assert not Order.objects.exists()
        assert not OrderNumberSequence.objects.exists()
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.quantity == 5
        assert second.quantity == 1
        assert CartItem.objects.filter(user=customer).count() == 2
        assert bus.events == []

    def test_storage_error_is_wrapped(self, checkout, product, monkeypatch):
        def broken_create(self, data, items):
            raise DatabaseError("connection reset")

        monkeypatch.setattr(OrderDjangoRepository, "create", broken_create)

        with pytest.raises(ServiceError) as exc_info:
            checkout((product, 1))

        assert exc_info.value.message == "Failed to create order"
        assert "connection reset" not in str(exc_info.value)


# ===========================================================================
# create_order_from_quote
# ===========================================================================


class TestCreateOrderFromQuote:
    @pytest.fixture()
    def accepted_quote(self, negotiator, customer, artisan, custom_product):
        quote = negotiator.create(
            customer.id,
            CreateQuoteRequestDTO(
                product_id=custom_product.id, requested_price=Decimal("50.00")
            ),
        )
        negotiator.respond_as_artisan(
            quote.id,
            artisan.id,
            RespondToQuoteDTO(action=QuoteAction.COUNTER, counter_offer=Decimal("60.00")),
        )
        return negotiator.respond_as_customer(
            quote.id, customer.id, RespondToQuoteDTO(action=QuoteAction.ACCEPT)
        )

    def test_orders_at_negotiated_price(
        self, order_service, customer, address, accepted_quote
    ):
        order = order_service.create_order_from_quote(
            customer.id,
            CreateOrderFromQuoteDTO(
                quote_request_id=accepted_quote.id, address_id=address.id
            ),
        )

        assert order.subtotal == Decimal("60.00")
        assert order.total == Decimal("66.00")
        accepted_quote.refresh_from_db()
        assert accepted_quote.status == QuoteStatus.COMPLETED

    def test_quote_can_only_be_ordered_once(
        self, order_service, customer, address, accepted_quote
    ):
        dto = CreateOrderFromQuoteDTO(
            quote_request_id=accepted_quote.id, address_id=address.id
        )
        order_service.create_order_from_quote(customer.id, dto)

        with pytest.raises(InvalidQuoteState):
            order_service.create_order_from_quote(customer.id, dto)

        assert Order.objects.count() == 1


# ===========================================================================
# Payment
# ===========================================================================


class TestProcessPayment:
    def test_marks_paid(self, order_service, order):
        paid = order_service.process_payment(order.id, "pi_123")

        assert paid.status == OrderStatus.PAID
        assert paid.payment_status == PaymentStatus.COMPLETED
        assert paid.payment_intent_id == "pi_123"

    def test_history_records_system_actor(self, order_service, order):
        order_service.process_payment(order.id, "pi_123")

        last = order_service.get_status_history(order.id)[-1]
        assert last.status == OrderStatus.PAID
        assert last.note == "Payment completed"
        assert last.created_by_id is None

    def test_only_pending_orders(self, order_service, order):
        order_service.process_payment(order.id, "pi_123")

        with pytest.raises(InvalidOrderState):
            order_service.process_payment(order.id, "pi_456")

    def test_publishes_status_change(
        self, order_service, order, bus, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            order_service.process_payment(order.id, "pi_123")

        [event] = bus.events
        assert isinstance(event, OrderStatusChanged)
        assert (event.old_status, event.new_status) == ("PENDING", "PAID")
        assert event.actor_id is None


# ===========================================================================
# Cancellation
# ===========================================================================


class TestCancelOrder:
    def test_restores_stock(self, order_service, order, customer, product):
        cancelled = order_service.cancel_order(order.id, customer.id, "Wrong size")

        assert cancelled.status == OrderStatus.CANCELLED
        product.refresh_from_db()
        assert product.quantity == 10
        assert order_service.get_status_history(order.id)[-1].note == "Wrong size"

    def test_second_cancel_restores_nothing(self, order_service, order, customer, product):
        order_service.cancel_order(order.id, customer.id)

        with pytest.raises(InvalidStatusTransition):
            order_service.cancel_order(order.id, customer.id)

        product.refresh_from_db()
        assert product.quantity == 10

    def test_cancel_after_payment_refunds(self, order_service, order, customer):
        order_service.process_payment(order.id, "pi_123")

        cancelled = order_service.cancel_order(order.id, customer.id)

        assert cancelled.payment_status == PaymentStatus.REFUNDED

    def test_event_carries_actor(
        self, order_service, order, customer, bus, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            order_service.cancel_order(order.id, customer.id)

        [event] = bus.events
        assert event.new_status == OrderStatus.CANCELLED
        assert event.actor_id == customer.id


# ===========================================================================
# Shipping
# ===========================================================================


class TestUpdateShippingInfo:
    def test_tracking_number_ships_processing_order(
        self, order_service, processing_order, artisan
    ):
        shipped = order_service.update_shipping_info(
            processing_order.id,
            artisan.id,
            UpdateShippingInfoDTO(
                tracking_number="TRK-1", tracking_url="https://track.example.com/TRK-1"
            ),
        )

        assert shipped.status == OrderStatus.SHIPPED
        assert shipped.tracking_number == "TRK-1"
        last = order_service.get_status_history(shipped.id)[-1]
        assert last.note == "Tracking number added"
        assert last.created_by_id == artisan.id

    def test_delivery_estimate_keeps_status(
        self, order_service, processing_order, artisan
    ):
        updated = order_service.update_shipping_info(
            processing_order.id,
            artisan.id,
            UpdateShippingInfoDTO(estimated_delivery=date(2026, 11, 2)),
        )

        assert updated.status == OrderStatus.PROCESSING
        assert updated.estimated_delivery == date(2026, 11, 2)

    def test_only_order_sellers(self, order_service, processing_order, other_artisan):
        with pytest.raises(NotOrderSeller):
            order_service.update_shipping_info(
                processing_order.id,
                other_artisan.id,
                UpdateShippingInfoDTO(tracking_number="TRK-1"),
            )

    def test_not_before_processing(self, order_service, order, artisan):
        with pytest.raises(InvalidOrderState):
            order_service.update_shipping_info(
                order.id, artisan.id, UpdateShippingInfoDTO(tracking_number="TRK-1")
            )


# ===========================================================================
# Queries
# ===========================================================================


class TestQueries:
    def test_buyer_and_seller_can_read(self, order_service, order, customer, artisan):
        assert order_service.get_order(order.id, customer.id).id == order.id
        assert order_service.get_order(order.id, artisan.id).id == order.id

    def test_stranger_sees_not_found(self, order_service, order, other_customer):
        with pytest.raises(OrderNotFound):
            order_service.get_order(order.id, other_customer.id)

    def test_admin_can_read(self, order_service, order, admin_user):
        assert order_service.get_order(order.id, admin_user.id, is_admin=True)

    def test_unknown_and_malformed_ids(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.get_order(uuid4())
        with pytest.raises(OrderNotFound):
            order_service.get_order("not-a-uuid")

    def test_by_number(self, order_service, order, customer):
        found = order_service.get_order_by_number(order.order_number, customer.id)

        assert found.id == order.id

    def test_history_hidden_from_strangers(self, order_service, order, other_customer):
        with pytest.raises(OrderNotFound):
            order_service.get_status_history(order.id, other_customer.id)

    def test_lists_by_role(self, order_service, order, customer, artisan, other_artisan):
        assert [o.id for o in order_service.list_customer_orders(customer.id)] == [order.id]
        assert [o.id for o in order_service.list_artisan_orders(artisan.id)] == [order.id]
        assert order_service.list_artisan_orders(other_artisan.id) == []
