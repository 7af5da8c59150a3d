from __future__ import annotations

from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from modules.accounts.models import Address, User, UserRole
from modules.cart.models import CartItem
from modules.catalog.models import Product, ProductStatus
from modules.orders.dtos import CreateOrderFromCartDTO
from modules.orders.views import build_order_service


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def _make_user(username: str, role: str) -> User:
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="testpass123",
        role=role,
    )


@pytest.fixture()
def customer() -> User:
    return _make_user("customer", UserRole.CUSTOMER)


@pytest.fixture()
def other_customer() -> User:
    return _make_user("other_customer", UserRole.CUSTOMER)


@pytest.fixture()
def artisan() -> User:
    return _make_user("artisan", UserRole.ARTISAN)


@pytest.fixture()
def other_artisan() -> User:
    return _make_user("other_artisan", UserRole.ARTISAN)


@pytest.fixture()
def admin_user() -> User:
    return _make_user("marketplace_admin", UserRole.ADMIN)


@pytest.fixture()
def address(customer) -> Address:
    return Address.objects.create(
        user=customer,
        full_name="Ana Souza",
        street="12 Main Street",
        city="Lisbon",
        state="Lisbon",
        zip_code="10000",
        country="PT",
        is_default=True,
    )


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product(artisan):
    """Factory for products sold by ``artisan`` unless another seller is given."""

    def _make(
        name: str = "Glazed vase",
        price: str = "100.00",
        quantity: int = 10,
        status: str = ProductStatus.PUBLISHED,
        is_customizable: bool = False,
        seller: User | None = None,
        discount_price: str | None = None,
    ) -> Product:
        return Product.objects.create(
            seller=seller or artisan,
            name=name,
            price=Decimal(price),
            discount_price=Decimal(discount_price) if discount_price else None,
            quantity=quantity,
            status=status,
            is_customizable=is_customizable,
        )

    return _make


@pytest.fixture()
def product(make_product) -> Product:
    return make_product()


@pytest.fixture()
def custom_product(make_product) -> Product:
    return make_product(name="Walnut bowl", price="100.00", is_customizable=True)


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


@pytest.fixture()
def client_for():
    """Return an ``APIClient`` force-authenticated as the given user."""

    def _client(user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def place_order(customer, address):
    """Check out ``lines`` (product, quantity) through the real order service."""

    def _place(*lines, buyer=None, buyer_address=None):
        buyer = buyer or customer
        for line_product, quantity in lines:
            CartItem.objects.create(user=buyer, product=line_product, quantity=quantity)
        return build_order_service().create_order_from_cart(
            buyer.id,
            CreateOrderFromCartDTO(address_id=(buyer_address or address).id),
        )

    return _place
