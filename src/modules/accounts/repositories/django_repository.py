"""Django ORM implementations of the account lookups.

Missing or malformed IDs resolve to ``None``; the service layer decides
which domain error that becomes.
"""

from __future__ import annotations

from typing import Optional

from django.core.exceptions import ValidationError

from modules.accounts.models import Address, User
from modules.accounts.repositories.interfaces import (
    IAddressRepository,
    IUserRepository,
)


class UserDjangoRepository(IUserRepository):
    def get_by_id(self, id: str) -> Optional[User]:
        try:
            return User.objects.filter(id=id, is_active=True).first()
        except (ValueError, ValidationError):
            return None


class AddressDjangoRepository(IAddressRepository):
    def get_by_id(self, id: str) -> Optional[Address]:
        try:
            return Address.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_user(self, id: str, user_id: str) -> Optional[Address]:
        try:
            return Address.objects.filter(id=id, user_id=user_id).first()
        except (ValueError, ValidationError):
            return None
