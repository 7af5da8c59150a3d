"""Generic repository interfaces (Dependency Inversion Principle).

``IReadRepository[T]`` is the lookup-only contract used for collaborators
the workflow engine only reads (users, addresses, products).
``IRepository[T]`` extends it with listing and persistence for the
aggregates the engine owns.  Service-layer code depends on these
abstractions, never on the Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, Protocol, TypeVar

from django.db import models

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Queryable(Protocol[T_co]):
    def filter(self, **kwargs: Any) -> models.QuerySet: ...


class IReadRepository(ABC, Generic[T]):
    """Lookup-only repository contract."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key, ``None`` when missing."""


class IRepository(IReadRepository[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``Order``, ``QuoteRequest``).
    """

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> Queryable[T]:
        """List entities with optional filters."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""
