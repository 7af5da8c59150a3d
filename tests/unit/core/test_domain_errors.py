"""Unit tests for the shared domain error taxonomy."""

from __future__ import annotations

import pytest
from django.db import DatabaseError, IntegrityError

from modules.cart.exceptions import CartValidationFailed
from modules.catalog.exceptions import OutOfStock
from modules.core.exceptions import (
    DomainError,
    ServiceError,
    storage_errors_as_service_error,
)
from modules.core.responses import domain_error_response
from modules.orders.exceptions import ForbiddenStatusChange, InvalidStatusTransition
from modules.quotes.exceptions import QuoteNotFound

pytestmark = pytest.mark.unit


class TestKinds:
    @pytest.mark.parametrize(
        ("exc_class", "kind", "status_code"),
        [
            (QuoteNotFound, "NOT_FOUND", 404),
            (ForbiddenStatusChange, "FORBIDDEN", 403),
            (InvalidStatusTransition, "INVALID_STATE", 409),
            (OutOfStock, "INSUFFICIENT_STOCK", 409),
            (CartValidationFailed, "INVALID_CART", 400),
            (ServiceError, "SERVICE_ERROR", 500),
        ],
    )
    def test_kind_and_status(self, exc_class, kind, status_code):
        exc = exc_class("boom")

        assert exc.kind == kind
        assert exc.status_code == status_code

    def test_as_dict_without_details(self):
        assert QuoteNotFound("Quote x not found.").as_dict() == {
            "code": "QUOTE_NOT_FOUND",
            "detail": "Quote x not found.",
        }

    def test_as_dict_with_details(self):
        exc = InvalidStatusTransition("nope", details={"from": "PENDING", "to": "SHIPPED"})

        assert exc.as_dict()["details"] == {"from": "PENDING", "to": "SHIPPED"}

    def test_code_override(self):
        assert DomainError("x", code="CUSTOM").code == "CUSTOM"

    def test_response_uses_status_code(self):
        response = domain_error_response(QuoteNotFound("missing"))

        assert response.status_code == 404
        assert response.data == {"code": "QUOTE_NOT_FOUND", "detail": "missing"}


class TestStorageErrorsAsServiceError:
    def test_wraps_database_error(self):
        @storage_errors_as_service_error("Failed to save")
        def save():
            raise IntegrityError("duplicate key value violates unique constraint")

        with pytest.raises(ServiceError) as exc_info:
            save()

        assert exc_info.value.message == "Failed to save"
        assert isinstance(exc_info.value.__cause__, DatabaseError)

    def test_domain_errors_pass_through(self):
        @storage_errors_as_service_error("Failed to save")
        def save():
            raise QuoteNotFound("missing")

        with pytest.raises(QuoteNotFound):
            save()

    def test_return_value_preserved(self):
        @storage_errors_as_service_error("Failed")
        def compute(a, b=2):
            return a * b

        assert compute(3, b=4) == 12
