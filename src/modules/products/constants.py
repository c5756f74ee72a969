"""Product catalog constants."""

from django.db import models


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    SOLD_OUT = "sold_out", "Sold out"
    INACTIVE = "inactive", "Inactive"
    PENDING = "pending", "Pending"
    DELETED = "deleted", "Deleted"


MAX_DISCOUNT_RATE = 100
