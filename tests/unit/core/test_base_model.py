"""Unit tests for BaseModel, exercised through concrete marketplace models."""

from __future__ import annotations

import uuid

import pytest
from freezegun import freeze_time

from modules.cart.models import CartItem

pytestmark = pytest.mark.unit


@pytest.fixture()
def item(customer, product):
    with freeze_time("2026-10-19 10:00:00"):
        return CartItem.objects.create(user=customer, product=product, quantity=1)


class TestBaseModel:
    def test_id_is_uuid_version_7(self, item):
        assert isinstance(item.id, uuid.UUID)
        assert item.id.version == 7

    def test_ids_are_time_ordered(self, customer, make_product):
        first = CartItem.objects.create(user=customer, product=make_product(name="A"))
        second = CartItem.objects.create(user=customer, product=make_product(name="B"))

        assert str(first.id) < str(second.id)

    def test_updated_at_changes_on_save(self, item):
        created = item.created_at

        with freeze_time("2026-10-19 11:00:00"):
            item.quantity = 2
            item.save()
        item.refresh_from_db()

        assert item.updated_at > created
        assert item.created_at == created

    def test_save_with_update_fields_includes_updated_at(self, item):
        original = item.updated_at

        with freeze_time("2026-10-19 11:00:00"):
            item.quantity = 3
            item.save(update_fields=["quantity"])
        item.refresh_from_db()

        assert item.quantity == 3
        assert item.updated_at > original

    def test_id_is_not_editable(self):
        assert CartItem._meta.get_field("id").editable is False
