"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  Field names
are snake_case in Python and camelCase on the wire (``alias_generator``);
both spellings are accepted on input.  DTOs are immutable (``frozen=True``).

- ``CreateProductDTO`` / ``ProductAttributeInputDTO``: product creation.
- ``UpdateProductDTO``: partial update.  Only fields present in the payload
  are applied, so ``{"discountPrice": null}`` clears a discount while an
  absent ``discountPrice`` leaves it untouched.
- ``ProductOutputDTO``: API response.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from modules.products.constants import MAX_DISCOUNT_RATE, ProductStatus

if TYPE_CHECKING:
    from modules.products.models import Product, ProductAttribute


class _CamelDTO(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _check_discount_rate(v: Optional[int]) -> Optional[int]:
    if v is not None and not 0 <= v <= MAX_DISCOUNT_RATE:
        raise ValueError("Discount rate must be between 0 and 100.")
    return v


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class ProductAttributeInputDTO(_CamelDTO):
    name: str = Field(min_length=1, max_length=100)
    value: str = Field(max_length=500)
    sort_order: int = 0
    is_visible: bool = True


class ProductAttributeUpdateDTO(_CamelDTO):
    """Changes to an existing attribute, addressed by ``id``."""

    id: UUID
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    value: Optional[str] = Field(default=None, max_length=500)
    sort_order: Optional[int] = None
    is_visible: Optional[bool] = None


class CreateProductDTO(_CamelDTO):
    """Immutable DTO for product creation requests.

    Validates:
    - ``price`` is greater than zero.
    - ``discount_price`` and ``shipping_fee`` are non-negative.
    - ``discount_rate`` is between 0 and 100.
    - ``stock_quantity`` is non-negative.
    """

    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    price: Decimal
    discount_price: Optional[Decimal] = None
    discount_rate: Optional[int] = None
    stock_quantity: int = 0
    status: ProductStatus = ProductStatus.PENDING
    thumbnail_url: str = ""
    images: List[str] = Field(default_factory=list)
    product_code: str = ""
    shipping_fee: Decimal = Decimal("0.00")
    sale_start_date: Optional[datetime] = None
    sale_end_date: Optional[datetime] = None
    attributes: List[ProductAttributeInputDTO] = Field(default_factory=list)

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("discount_price", "shipping_fee")
    @classmethod
    def amount_must_be_non_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Amount cannot be negative.")
        return v

    @field_validator("discount_rate")
    @classmethod
    def discount_rate_in_range(cls, v: Optional[int]) -> Optional[int]:
        return _check_discount_rate(v)

    @field_validator("stock_quantity")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v


class UpdateProductDTO(_CamelDTO):
    """Immutable DTO for partial product updates.

    ``model_fields_set`` tells an omitted field apart from one explicitly
    sent as ``null``.  Nullable columns (discounts, sale dates) may be
    cleared; the rest reject ``null``.
    """

    NON_NULLABLE_FIELDS: ClassVar[tuple[str, ...]] = (
        "name",
        "description",
        "price",
        "stock_quantity",
        "status",
        "thumbnail_url",
        "images",
        "product_code",
        "shipping_fee",
    )
    COLLECTION_FIELDS: ClassVar[tuple[str, ...]] = (
        "attributes",
        "attribute_updates",
        "attribute_ids_to_remove",
    )

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = None
    discount_price: Optional[Decimal] = None
    discount_rate: Optional[int] = None
    stock_quantity: Optional[int] = None
    status: Optional[ProductStatus] = None
    thumbnail_url: Optional[str] = None
    images: Optional[List[str]] = None
    product_code: Optional[str] = None
    shipping_fee: Optional[Decimal] = None
    sale_start_date: Optional[datetime] = None
    sale_end_date: Optional[datetime] = None
    attributes: List[ProductAttributeInputDTO] = Field(default_factory=list)
    attribute_updates: List[ProductAttributeUpdateDTO] = Field(default_factory=list)
    attribute_ids_to_remove: List[UUID] = Field(default_factory=list)

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("discount_price", "shipping_fee")
    @classmethod
    def amount_must_be_non_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Amount cannot be negative.")
        return v

    @field_validator("discount_rate")
    @classmethod
    def discount_rate_in_range(cls, v: Optional[int]) -> Optional[int]:
        return _check_discount_rate(v)

    @field_validator("stock_quantity")
    @classmethod
    def stock_must_be_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v

    @model_validator(mode="after")
    def required_fields_not_cleared(self):
        cleared = [
            name
            for name in self.NON_NULLABLE_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}.")
        return self

    def field_changes(self) -> dict:
        """Return only the scalar fields the caller explicitly sent."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name not in self.COLLECTION_FIELDS
        }


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class ProductAttributeOutputDTO(_CamelDTO):
    id: UUID
    name: str
    value: str
    sort_order: int
    is_visible: bool

    @classmethod
    def from_entity(cls, attribute: ProductAttribute) -> ProductAttributeOutputDTO:
        return cls(
            id=attribute.id,
            name=attribute.name,
            value=attribute.value,
            sort_order=attribute.sort_order,
            is_visible=attribute.is_visible,
        )


class ProductOutputDTO(_CamelDTO):
    """Immutable DTO for product API responses."""

    id: UUID
    name: str
    description: str
    price: Decimal
    discount_price: Optional[Decimal]
    discount_rate: Optional[int]
    final_price: Decimal
    stock_quantity: int
    status: str
    thumbnail_url: str
    images: List[str]
    product_code: str
    shipping_fee: Decimal
    sale_start_date: Optional[datetime]
    sale_end_date: Optional[datetime]
    seller_id: Optional[int]
    attributes: List[ProductAttributeOutputDTO]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product) -> ProductOutputDTO:
        """Build an output DTO from a Product model instance."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            discount_price=product.discount_price,
            discount_rate=product.discount_rate,
            final_price=product.final_price,
            stock_quantity=product.stock_quantity,
            status=product.status,
            thumbnail_url=product.thumbnail_url,
            images=product.images,
            product_code=product.product_code,
            shipping_fee=product.shipping_fee,
            sale_start_date=product.sale_start_date,
            sale_end_date=product.sale_end_date,
            seller_id=product.seller_id,
            attributes=[
                ProductAttributeOutputDTO.from_entity(a)
                for a in product.attributes.all()
            ],
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
