"""Unit tests for order DTO validation."""

from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.constants import OrderStatus, PaymentMethod
from modules.orders.dtos import (
    CreateOrderFromCartDTO,
    CreateOrderFromQuoteDTO,
    UpdateOrderStatusDTO,
    UpdateShippingInfoDTO,
)

pytestmark = pytest.mark.unit


class TestCreateOrderDTOs:
    def test_cart_defaults(self):
        dto = CreateOrderFromCartDTO(address_id=uuid4())

        assert dto.payment_method == PaymentMethod.CREDIT_CARD
        assert dto.notes == ""

    def test_quote_requires_quote_id(self):
        with pytest.raises(ValidationError):
            CreateOrderFromQuoteDTO(address_id=uuid4())

    def test_unknown_payment_method(self):
        with pytest.raises(ValidationError):
            CreateOrderFromCartDTO(address_id=uuid4(), payment_method="BARTER")

    def test_is_immutable(self):
        dto = CreateOrderFromCartDTO(address_id=uuid4())

        with pytest.raises(ValidationError):
            dto.notes = "changed"


class TestUpdateOrderStatusDTO:
    def test_normalises_case_and_whitespace(self):
        assert UpdateOrderStatusDTO(status=" paid ").status == OrderStatus.PAID

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            UpdateOrderStatusDTO(status="LOST")


class TestUpdateShippingInfoDTO:
    def test_requires_one_field(self):
        with pytest.raises(ValidationError):
            UpdateShippingInfoDTO()

    def test_any_single_field_is_enough(self):
        assert UpdateShippingInfoDTO(tracking_number="TRK-1").tracking_number == "TRK-1"
        assert UpdateShippingInfoDTO(estimated_delivery=date(2026, 11, 2))
