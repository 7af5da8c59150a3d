"""Marketplace users and their shipping addresses.

``User`` replaces Django's default auth user so every actor carries a
marketplace ``role`` (ADMIN, ARTISAN, CUSTOMER) and a UUIDv7 primary key
consistent with the rest of the domain.
"""

from __future__ import annotations

import uuid6
from django.contrib.auth.models import AbstractUser
from django.db import models

from modules.core.models import BaseModel


class UserRole(models.TextChoices):
    ADMIN = "ADMIN", "Admin"
    ARTISAN = "ARTISAN", "Artisan"
    CUSTOMER = "CUSTOMER", "Customer"


class User(AbstractUser):
    """Authenticated marketplace actor."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CUSTOMER,
    )

    class Meta:
        db_table = "users"
        indexes = [
            models.Index(fields=["role"], name="users_role_idx"),
        ]

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Address(BaseModel):
    """Shipping address owned by a single user."""

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True, default="")
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=120)
    state = models.CharField(max_length=120)
    zip_code = models.CharField(max_length=20)
    country = models.CharField(max_length=80)
    is_default = models.BooleanField(default=False)

    class Meta:
        db_table = "addresses"
        ordering = ["-is_default", "created_at"]

    def as_snapshot(self) -> dict[str, str]:
        """Plain-dict copy stored on orders so later edits don't rewrite history."""
        return {
            "full_name": self.full_name,
            "phone": self.phone,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
        }

    def __str__(self) -> str:
        return f"{self.full_name}, {self.street}, {self.city}"
