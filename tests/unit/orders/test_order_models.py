"""Unit tests for Order model helpers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem

pytestmark = pytest.mark.unit


class TestOrderStateHelpers:
    @pytest.mark.parametrize(
        ("current", "target", "allowed"),
        [
            (OrderStatus.PENDING, OrderStatus.PAID, True),
            (OrderStatus.PENDING, OrderStatus.SHIPPED, False),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED, True),
            (OrderStatus.DELIVERED, OrderStatus.REFUNDED, True),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED, False),
            (OrderStatus.CANCELLED, OrderStatus.PENDING, False),
        ],
    )
    def test_can_transition_to(self, current, target, allowed):
        assert Order(status=current).can_transition_to(target) is allowed


class TestOrderItem:
    def test_line_total(self):
        assert OrderItem(price=Decimal("12.50"), quantity=3).line_total == Decimal("37.50")


class TestSellers:
    def test_seller_ids(self, place_order, product, make_product, artisan, other_artisan):
        order = place_order((product, 1), (make_product(name="Throw", seller=other_artisan), 1))

        assert order.seller_ids() == {artisan.id, other_artisan.id}

    def test_str_uses_order_number(self, place_order, product):
        order = place_order((product, 1))

        assert str(order) == f"Order {order.order_number} (PENDING)"
