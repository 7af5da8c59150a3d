"""Django ORM implementation of the Product lookup."""

from __future__ import annotations

from typing import Optional

from django.core.exceptions import ValidationError

from modules.catalog.models import Product
from modules.catalog.repositories.interfaces import IProductRepository


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM.

    Returns ``None`` for non-existent or invalid IDs.
    """

    def get_by_id(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_with_details(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.select_related("seller").filter(id=id).first()
        except (ValueError, ValidationError):
            return None
