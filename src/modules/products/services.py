"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- Price must be greater than zero (DTO and model validation).
- Discount rate stays within 0..100.
- Sale end date cannot precede the start date.
- Partial updates only touch fields present in the request.
- Attribute changes only apply to attributes owned by the product.
- Deletion is a soft delete.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from modules.products.exceptions import InvalidProductData, ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

# DTO field name -> model column where they differ
COLUMN_FOR_FIELD = {"images": "image_urls"}


def _validate(product: Product) -> None:
    try:
        product.full_clean(exclude=["seller"])
    except ValidationError as exc:
        messages = "; ".join(
            f"{field}: {' '.join(errors)}"
            for field, errors in exc.message_dict.items()
        )
        raise InvalidProductData(messages) from exc


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(
        self, dto: CreateProductDTO, seller_id: Optional[int] = None
    ) -> Product:
        """Create a product together with its attributes.

        Raises:
            InvalidProductData: if the product fails model validation.
        """
        product = Product(
            name=dto.name,
            description=dto.description,
            price=dto.price,
            discount_price=dto.discount_price,
            discount_rate=dto.discount_rate,
            stock_quantity=dto.stock_quantity,
            status=dto.status,
            thumbnail_url=dto.thumbnail_url,
            product_code=dto.product_code,
            shipping_fee=dto.shipping_fee,
            sale_start_date=dto.sale_start_date,
            sale_end_date=dto.sale_end_date,
            seller_id=seller_id,
        )
        product.images = dto.images
        _validate(product)

        product = self._repo.save(product)
        self._repo.add_attributes(
            product, [attribute.model_dump() for attribute in dto.attributes]
        )
        logger.info(
            "product.created",
            product_id=str(product.id),
            attributes=len(dto.attributes),
        )
        return self.get_product(product.id)

    @transaction.atomic
    def update_product(self, id: Any, dto: UpdateProductDTO) -> Product:
        """Apply a partial update to an existing product.

        Attribute edits and removals that reference attributes of another
        product are ignored.

        Raises:
            ProductNotFound: if the product does not exist.
            InvalidProductData: if the result fails model validation.
        """
        product = self._repo.get_for_update(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        log = logger.bind(product_id=str(product.id))

        changes = dto.field_changes()
        for field, value in changes.items():
            setattr(product, field, value)
        _validate(product)
        # only the sent columns; stock is also moved by order placement
        product = self._repo.save(
            product, update_fields=[COLUMN_FOR_FIELD.get(f, f) for f in changes]
        )

        removed = 0
        if dto.attribute_ids_to_remove:
            removed = self._repo.remove_attributes(product, dto.attribute_ids_to_remove)

        updated = 0
        for attribute_update in dto.attribute_updates:
            attribute_changes = attribute_update.model_dump(
                include=attribute_update.model_fields_set - {"id"},
                exclude_none=True,
            )
            if self._repo.update_attribute(
                product, attribute_update.id, attribute_changes
            ):
                updated += 1

        self._repo.add_attributes(
            product, [attribute.model_dump() for attribute in dto.attributes]
        )

        log.info(
            "product.updated",
            fields=sorted(changes),
            attributes_added=len(dto.attributes),
            attributes_updated=updated,
            attributes_removed=removed,
        )
        return self.get_product(product.id)

    @transaction.atomic
    def delete_product(self, id: Any) -> None:
        """Soft-delete a product.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        if not self._repo.delete(id):
            raise ProductNotFound(f"Product {id} not found.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """Return live products, optionally filtered."""
        return self._repo.list(filters)

    def get_product(self, id: UUID | str) -> Product:
        """Retrieve a single live product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product
