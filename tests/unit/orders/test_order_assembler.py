"""Unit tests for OrderAssembler.

Covers:
- pricing: subtotal, tax rounded half-up to cents, shipping and total
- from_cart: items snapshot the effective price and product data, the
  shipping address is copied, stock is taken and a history row written
- from_cart refuses invalid carts and foreign addresses
- from_quote: single line at the negotiated price, quote completed
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.accounts.exceptions import AddressNotFound, UserNotFound
from modules.accounts.models import Address
from modules.cart.exceptions import CartValidationFailed
from modules.cart.models import CartItem
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.dtos import CreateOrderFromCartDTO, CreateOrderFromQuoteDTO
from modules.orders.models import Order
from modules.quotes.constants import QuoteAction, QuoteStatus
from modules.quotes.dtos import CreateQuoteRequestDTO, RespondToQuoteDTO

pytestmark = pytest.mark.unit


def _line(price: str, quantity: int) -> dict:
    return {"price": Decimal(price), "quantity": quantity}


# ===========================================================================
# Pricing
# ===========================================================================


class TestPrice:
    def test_subtotal_tax_and_total(self, assembler):
        totals = assembler.price([_line("100.00", 2)])

        assert totals == {
            "subtotal": Decimal("200.00"),
            "tax": Decimal("20.00"),
            "shipping_cost": Decimal("0.00"),
            "discount": Decimal("0.00"),
            "total": Decimal("220.00"),
        }

    def test_tax_rounds_half_up(self, assembler):
        totals = assembler.price([_line("0.05", 1)])

        assert totals["tax"] == Decimal("0.01")
        assert totals["total"] == Decimal("0.06")

    def test_multiple_lines(self, assembler):
        totals = assembler.price([_line("24.00", 3), _line("58.50", 1)])

        assert totals["subtotal"] == Decimal("130.50")
        assert totals["tax"] == Decimal("13.05")
        assert totals["total"] == Decimal("143.55")


# ===========================================================================
# from_cart
# ===========================================================================


class TestFromCart:
    @pytest.fixture()
    def dto(self, address):
        return CreateOrderFromCartDTO(address_id=address.id, notes="Gift wrap")

    def test_builds_pending_order(self, assembler, customer, product, dto):
        CartItem.objects.create(user=customer, product=product, quantity=2)

        order = assembler.from_cart(customer.id, dto)

        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.buyer_id == customer.id
        assert order.total == Decimal("220.00")
        assert order.notes == "Gift wrap"
        assert order.order_number.startswith("AC-")

    def test_items_snapshot_effective_price(
        self, assembler, customer, artisan, make_product, dto
    ):
        product = make_product(price="30.00", discount_price="25.00")
        CartItem.objects.create(user=customer, product=product, quantity=1)

        order = assembler.from_cart(customer.id, dto)

        [item] = order.items.all()
        assert item.price == Decimal("25.00")
        assert item.seller_id == artisan.id
        assert item.product_data["name"] == "Glazed vase"

    def test_copies_shipping_address(self, assembler, customer, product, address, dto):
        CartItem.objects.create(user=customer, product=product, quantity=1)

        order = assembler.from_cart(customer.id, dto)

        assert order.shipping_address == address.as_snapshot()
        assert order.shipping_address["city"] == "Lisbon"

    def test_takes_stock_and_writes_history(self, assembler, customer, product, dto):
        CartItem.objects.create(user=customer, product=product, quantity=2)

        order = assembler.from_cart(customer.id, dto)

        product.refresh_from_db()
        assert product.quantity == 8
        [history] = order.status_history.all()
        assert history.status == OrderStatus.PENDING
        assert history.old_status is None
        assert history.note == "Order created"
        assert history.created_by_id == customer.id

    def test_leaves_cart_for_the_service(self, assembler, customer, product, dto):
        CartItem.objects.create(user=customer, product=product, quantity=1)

        assembler.from_cart(customer.id, dto)

        assert CartItem.objects.filter(user=customer).count() == 1

    def test_empty_cart(self, assembler, customer, dto):
        with pytest.raises(CartValidationFailed) as exc_info:
            assembler.from_cart(customer.id, dto)

        assert exc_info.value.message == "Your cart is empty"
        assert not Order.objects.exists()

    def test_understocked_cart_reports_items(
        self, assembler, customer, make_product, dto
    ):
        product = make_product(quantity=1)
        CartItem.objects.create(user=customer, product=product, quantity=2)

        with pytest.raises(CartValidationFailed) as exc_info:
            assembler.from_cart(customer.id, dto)

        [detail] = exc_info.value.details
        assert detail["product_id"] == str(product.id)
        assert detail["reason"] == "OUT_OF_STOCK"
        product.refresh_from_db()
        assert product.quantity == 1

    def test_address_must_belong_to_buyer(
        self, assembler, customer, other_customer, product
    ):
        foreign = Address.objects.create(
            user=other_customer,
            full_name="Bruno Lima",
            street="1 Side Street",
            city="Porto",
            state="Porto",
            zip_code="40000",
            country="PT",
        )
        CartItem.objects.create(user=customer, product=product, quantity=1)

        with pytest.raises(AddressNotFound):
            assembler.from_cart(customer.id, CreateOrderFromCartDTO(address_id=foreign.id))

    def test_unknown_buyer(self, assembler, dto):
        with pytest.raises(UserNotFound):
            assembler.from_cart(uuid4(), dto)


# ===========================================================================
# from_quote
# ===========================================================================


class TestFromQuote:
    @pytest.fixture()
    def accepted_quote(self, negotiator, customer, artisan, custom_product):
        quote = negotiator.create(
            customer.id,
            CreateQuoteRequestDTO(
                product_id=custom_product.id,
                requested_price=Decimal("60.00"),
                specifications="Dark stain",
            ),
        )
        return negotiator.respond_as_artisan(
            quote.id, artisan.id, RespondToQuoteDTO(action=QuoteAction.ACCEPT)
        )

    def test_single_line_at_negotiated_price(
        self, assembler, customer, artisan, address, accepted_quote, custom_product
    ):
        order = assembler.from_quote(
            customer.id,
            CreateOrderFromQuoteDTO(
                quote_request_id=accepted_quote.id, address_id=address.id
            ),
        )

        [item] = order.items.all()
        assert item.price == Decimal("60.00")
        assert item.quantity == 1
        assert item.seller_id == artisan.id
        assert item.product_data["custom_specifications"] == "Dark stain"
        assert order.quote_request_id == accepted_quote.id
        assert order.total == Decimal("66.00")
        custom_product.refresh_from_db()
        assert custom_product.quantity == 9

    def test_completes_quote(self, assembler, customer, address, accepted_quote):
        assembler.from_quote(
            customer.id,
            CreateOrderFromQuoteDTO(
                quote_request_id=accepted_quote.id, address_id=address.id
            ),
        )

        accepted_quote.refresh_from_db()
        assert accepted_quote.status == QuoteStatus.COMPLETED
