"""Quote repositories package."""

from modules.quotes.repositories.django_repository import QuoteDjangoRepository
from modules.quotes.repositories.interfaces import IQuoteRepository

__all__ = ["IQuoteRepository", "QuoteDjangoRepository"]
