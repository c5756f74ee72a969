"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups the catalog needs and
the stock primitives the order workflow relies on.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db import models

    from modules.products.models import Product, ProductAttribute


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[Product]:
        """Lock and return a live product, or ``None``."""

    @abstractmethod
    def save(
        self, entity: Product, update_fields: Optional[Iterable[str]] = None
    ) -> Product:
        """Persist ``entity``; only ``update_fields`` when given."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List live products with optional filters."""

    @abstractmethod
    def lock_many(self, ids: Iterable[UUID]) -> Dict[UUID, Product]:
        """Lock the given products (SELECT FOR UPDATE) in primary-key order.

        Missing or soft-deleted products are absent from the result.
        """

    @abstractmethod
    def reserve_stock(self, id: UUID, quantity: int) -> bool:
        """Atomically decrement stock if at least ``quantity`` is available.

        Returns ``False`` (and changes nothing) when stock is insufficient.
        """

    @abstractmethod
    def release_stock(self, id: UUID, quantity: int) -> None:
        """Atomically add ``quantity`` back to the product's stock."""

    @abstractmethod
    def add_attributes(
        self, product: Product, attributes: Iterable[Dict[str, Any]]
    ) -> List[ProductAttribute]:
        """Attach new attributes to ``product``."""

    @abstractmethod
    def update_attribute(
        self, product: Product, attribute_id: UUID, changes: Dict[str, Any]
    ) -> Optional[ProductAttribute]:
        """Update one of ``product``'s attributes; ``None`` if not owned."""

    @abstractmethod
    def remove_attributes(self, product: Product, attribute_ids: Iterable[UUID]) -> int:
        """Delete attributes owned by ``product``; returns how many went away."""
