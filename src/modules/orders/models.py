"""Order, OrderItem, OrderStatusHistory and OrderNumberSequence models.

Business rules implemented:
- ``subtotal == sum(item.price * item.quantity)`` and
  ``total == subtotal + tax + shipping_cost - discount``; both are computed
  once by ``OrderAssembler`` and never edited independently.
- Status changes go through ``OrderStateMachine``; each one appends an
  ``OrderStatusHistory`` row in the same transaction.
- ``order_number`` is human readable (``AC-YYMMDD-0001``) and unique.
- ``OrderItem`` snapshots the unit price and product display data at
  purchase time, so catalogue edits never rewrite past orders.
- ``shipping_address`` is a copy of the chosen ``Address`` for the same
  reason.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import (
    VALID_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)

_MONEY = {"max_digits": 10, "decimal_places": 2}


class Order(BaseModel):
    """Order aggregate root.

    The UUIDv7 ``id`` is used for internal references and API look-ups;
    ``order_number`` is what buyers and sellers see.
    """

    order_number = models.CharField(max_length=32, unique=True, editable=False)
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    address = models.ForeignKey(
        "accounts.Address",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    shipping_address = models.JSONField(default=dict, blank=True)
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CREDIT_CARD,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_intent_id = models.CharField(max_length=255, blank=True, default="")
    subtotal = models.DecimalField(default=Decimal("0.00"), **_MONEY)
    tax = models.DecimalField(default=Decimal("0.00"), **_MONEY)
    shipping_cost = models.DecimalField(default=Decimal("0.00"), **_MONEY)
    discount = models.DecimalField(default=Decimal("0.00"), **_MONEY)
    total = models.DecimalField(default=Decimal("0.00"), **_MONEY)
    quote_request = models.ForeignKey(
        "quotes.QuoteRequest",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    notes = models.TextField(blank=True, default="")
    tracking_number = models.CharField(max_length=100, blank=True, default="")
    tracking_url = models.URLField(max_length=500, blank=True, default="")
    estimated_delivery = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["buyer", "status"], name="orders_buyer_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(subtotal__gte=0) & models.Q(total__gte=0),
                name="orders_amounts_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    # ------------------------------------------------------------------
    # Parties
    # ------------------------------------------------------------------

    def seller_ids(self) -> set[UUID]:
        return {item.seller_id for item in self.items.all()}

    def __str__(self) -> str:
        return f"Order {self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Immutable purchase line."""

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sold_items",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(**_MONEY)
    product_data = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["seller"], name="order_items_seller_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def __str__(self) -> str:
        return f"{self.quantity}x {self.product_data.get('name', self.product_id)}"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail of status changes.

    ``created_by`` is ``None`` when the system made the change (payment
    processing).
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    status = models.CharField(max_length=20, choices=OrderStatus.choices)
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    note = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_status_changes",
    )

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at"]
        verbose_name_plural = "order status history"

    def __str__(self) -> str:
        return f"{self.old_status} -> {self.status}"


class OrderNumberSequence(BaseModel):
    """Per-day counter behind order numbers."""

    day = models.DateField(unique=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "order_number_sequences"

    def __str__(self) -> str:
        return f"{self.day:%Y-%m-%d}: {self.last_value}"
