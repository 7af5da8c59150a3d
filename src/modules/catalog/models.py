"""Product catalogue consumed by carts, quotes and orders.

Business rules implemented:
- Only PUBLISHED products can be purchased through a cart.
- Only ``is_customizable`` products can be the subject of a quote request.
- ``quantity`` is available stock and can never go negative (DB constraint);
  every adjustment goes through ``InventoryLedger``.
- Effective unit price is ``discount_price`` when set, otherwise ``price``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class ProductStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    PUBLISHED = "PUBLISHED", "Published"
    OUT_OF_STOCK = "OUT_OF_STOCK", "Out of stock"
    DISCONTINUED = "DISCONTINUED", "Discontinued"
    DELETED = "DELETED", "Deleted"


class Product(BaseModel):
    """A good listed by an artisan."""

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="products",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    discount_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )
    quantity = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.DRAFT,
    )
    is_customizable = models.BooleanField(default=False)
    images = models.JSONField(default=list, blank=True)
    attributes = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="products_status_idx"),
            models.Index(fields=["seller"], name="products_seller_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="products_quantity_non_negative",
            ),
        ]

    @property
    def is_published(self) -> bool:
        return self.status == ProductStatus.PUBLISHED

    @property
    def effective_price(self) -> Decimal:
        return self.discount_price or self.price

    def snapshot(self) -> dict[str, Any]:
        """Frozen display data copied onto order items."""
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "images": list(self.images or []),
            "attributes": dict(self.attributes or {}),
            "is_customizable": self.is_customizable,
        }

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"
