"""QuoteRequest and QuoteMessage models.

Business rules implemented:
- ``final_price`` is set if and only if status is ACCEPTED or COMPLETED
  (enforced by a check constraint).
- ``artisan`` is the product's seller at creation time.
- The message thread is append-only and never changes status.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel
from modules.quotes.constants import (
    PRICED_STATUSES,
    QuoteParty,
    QuoteStatus,
)


class QuoteRequest(BaseModel):
    """Price negotiation between a customer and an artisan over one product."""

    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="quote_requests",
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="quote_requests",
    )
    artisan = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="received_quote_requests",
    )
    requested_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    specifications = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=QuoteStatus.choices,
        default=QuoteStatus.PENDING,
    )
    counter_offer = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    last_offer_by = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=QuoteParty.choices,
        null=True,
        blank=True,
    )
    final_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    expires_at = models.DateTimeField()

    class Meta:
        db_table = "quote_requests"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "expires_at"], name="quotes_status_exp_idx"),
            models.Index(fields=["customer"], name="quotes_customer_idx"),
            models.Index(fields=["artisan"], name="quotes_artisan_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(
                        status__in=sorted(PRICED_STATUSES),
                        final_price__isnull=False,
                    )
                    | (
                        ~models.Q(status__in=sorted(PRICED_STATUSES))
                        & models.Q(final_price__isnull=True)
                    )
                ),
                name="quotes_final_price_iff_priced",
            ),
        ]

    def is_party(self, user_id) -> bool:
        return user_id in (self.customer_id, self.artisan_id)

    def counterpart_of(self, user_id):
        """Return the id of the other party in the negotiation."""
        return self.artisan_id if user_id == self.customer_id else self.customer_id

    def __str__(self) -> str:
        return f"Quote {self.id} ({self.status})"


class QuoteMessage(BaseModel):
    quote = models.ForeignKey(
        "quotes.QuoteRequest",
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="quote_messages",
    )
    message = models.TextField()

    class Meta:
        db_table = "quote_messages"
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.sender_id}: {self.message[:40]}"
