"""In-app notifications.

Rows are written by the ``notifications.deliver_notification`` task and
never by request handlers directly.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class NotificationType(models.TextChoices):
    QUOTE_REQUEST = "QUOTE_REQUEST", "Quote request"
    QUOTE_RESPONSE = "QUOTE_RESPONSE", "Quote response"
    ORDER_STATUS = "ORDER_STATUS", "Order status"
    MESSAGE = "MESSAGE", "Message"
    SYSTEM = "SYSTEM", "System"


class Notification(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=20, choices=NotificationType.choices)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notifications_unread_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type}: {self.title}"
