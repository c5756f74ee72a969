"""Django ORM implementation of the Product repository.

Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising, and the Service Layer decides how to translate a
missing entity into a domain error.

Stock changes are issued as single conditional ``UPDATE`` statements
(``stock_quantity = stock_quantity - n WHERE stock_quantity >= n``), so
the database, not a Python read-modify-write, guarantees stock never
goes negative.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, QuerySet
from django.utils import timezone

from modules.products.models import Product, ProductAttribute
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Product]:
        """Retrieve a live product by primary key.

        Returns ``None`` for non-existent, soft-deleted or invalid IDs.
        """
        try:
            return (
                Product.objects.alive()
                .prefetch_related("attributes")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Product]:
        """Like ``get_by_id`` but holds a row lock until the transaction ends."""
        try:
            return Product.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """List live products with optional Django ORM look-ups.

        Returns a lazy QuerySet so API filter backends can refine it::

            {"status": "active"}
            {"name__icontains": "shirt"}
        """
        queryset = Product.objects.alive().prefetch_related("attributes")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(
        self, entity: Product, update_fields: Optional[Iterable[str]] = None
    ) -> Product:
        """Persist a product; ``update_fields`` limits which columns are written."""
        if update_fields is None:
            entity.save()
        else:
            entity.save(update_fields=list(update_fields))
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        """Soft-delete a product by ID.

        Returns ``True`` if the product was found and soft-deleted,
        ``False`` if no product exists with the given ID.
        """
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Stock primitives (used by the order workflow)
    # ------------------------------------------------------------------

    def lock_many(self, ids: Iterable[UUID]) -> Dict[UUID, Product]:
        unique_ids = set(ids)
        products = (
            Product.objects.alive()
            .select_for_update()
            .filter(id__in=unique_ids)
            .order_by("id")
        )
        return {product.id: product for product in products}

    def reserve_stock(self, id: UUID, quantity: int) -> bool:
        updated = Product.objects.filter(id=id, stock_quantity__gte=quantity).update(
            stock_quantity=F("stock_quantity") - quantity,
            updated_at=timezone.now(),
        )
        return updated == 1

    def release_stock(self, id: UUID, quantity: int) -> None:
        Product.objects.filter(id=id).update(
            stock_quantity=F("stock_quantity") + quantity,
            updated_at=timezone.now(),
        )

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def add_attributes(
        self, product: Product, attributes: Iterable[Dict[str, Any]]
    ) -> List[ProductAttribute]:
        created = [
            ProductAttribute.objects.create(product=product, **data)
            for data in attributes
        ]
        if created:
            logger.info(
                "product.attributes_added",
                product_id=str(product.id),
                count=len(created),
            )
        return created

    def update_attribute(
        self, product: Product, attribute_id: UUID, changes: Dict[str, Any]
    ) -> Optional[ProductAttribute]:
        attribute = ProductAttribute.objects.filter(
            id=attribute_id, product=product
        ).first()
        if attribute is None:
            return None
        for field, value in changes.items():
            setattr(attribute, field, value)
        attribute.save()
        return attribute

    def remove_attributes(self, product: Product, attribute_ids: Iterable[UUID]) -> int:
        deleted, _ = ProductAttribute.objects.filter(
            id__in=list(attribute_ids), product=product
        ).delete()
        return deleted
