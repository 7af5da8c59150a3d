"""Account repositories package."""

from modules.accounts.repositories.django_repository import (
    AddressDjangoRepository,
    UserDjangoRepository,
)
from modules.accounts.repositories.interfaces import (
    IAddressRepository,
    IUserRepository,
)

__all__ = [
    "AddressDjangoRepository",
    "IAddressRepository",
    "IUserRepository",
    "UserDjangoRepository",
]
