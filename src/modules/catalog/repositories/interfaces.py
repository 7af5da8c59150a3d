"""Product lookup contract."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IReadRepository

if TYPE_CHECKING:
    from modules.catalog.models import Product


class IProductRepository(IReadRepository["Product"]):
    """Read-only access to products (status, quantity, seller, customisation)."""

    @abstractmethod
    def get_with_details(self, id: str) -> Optional[Product]:
        """Retrieve a product with its seller eagerly loaded."""
