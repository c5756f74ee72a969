"""Product catalog models.

Catalog invariants:
- Price must be greater than zero.
- Stock quantity can never be negative (PositiveIntegerField + check).
- Discount rate is a whole percentage between 0 and 100.
- ``final_price``: an explicit discount price wins over a discount rate.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel
from modules.products.constants import MAX_DISCOUNT_RATE, ProductStatus

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


class Product(SoftDeleteModel):
    """Product aggregate root.

    ``image_urls`` is stored as a comma-separated string and exposed as a
    list through ``images``.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(CENTS)],
    )
    discount_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    discount_rate = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(MAX_DISCOUNT_RATE)],
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.PENDING,
    )
    thumbnail_url = models.URLField(max_length=500, blank=True, default="")
    image_urls = models.TextField(blank=True, default="")
    product_code = models.CharField(max_length=64, blank=True, default="")
    shipping_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    sale_start_date = models.DateTimeField(null=True, blank=True)
    sale_end_date = models.DateTimeField(null=True, blank=True)
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    class Meta:
        db_table = "products"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="products_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(discount_rate__isnull=True)
                | models.Q(discount_rate__lte=MAX_DISCOUNT_RATE),
                name="products_discount_rate_range",
            ),
        ]

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    @property
    def final_price(self) -> Decimal:
        """Sale price after applying the discount price or discount rate."""
        if self.discount_price is not None:
            return self.discount_price
        if self.discount_rate is not None:
            factor = (Decimal(100) - Decimal(self.discount_rate)) / Decimal(100)
            return (self.price * factor).quantize(CENTS, rounding=ROUND_HALF_UP)
        return self.price

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @property
    def images(self) -> list[str]:
        if not self.image_urls:
            return []
        return [url for url in self.image_urls.split(",") if url]

    @images.setter
    def images(self, urls: list[str]) -> None:
        self.image_urls = ",".join(urls)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})
        rate = self.discount_rate
        if rate is not None and not 0 <= rate <= MAX_DISCOUNT_RATE:
            raise ValidationError(
                {"discount_rate": "Discount rate must be between 0 and 100."}
            )
        if (
            self.sale_start_date
            and self.sale_end_date
            and self.sale_end_date < self.sale_start_date
        ):
            raise ValidationError(
                {"sale_end_date": "Sale end date must be after the start date."}
            )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=str(self.id),
                name=self.name,
            )

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"


class ProductAttribute(BaseModel):
    """Free-form descriptive attribute (brand, model, origin, ...)."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="attributes",
    )
    name = models.CharField(max_length=100)
    value = models.CharField(max_length=500)
    sort_order = models.IntegerField(default=0)
    is_visible = models.BooleanField(default=True)

    class Meta:
        db_table = "product_attributes"
        ordering = ["sort_order", "created_at"]

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"
