"""Storefront profile attached to Django's user.

Credentials, email and activation stay on ``AUTH_USER_MODEL``; the profile
holds the shopper-facing details (display name, contact and payout data).
Users created outside registration (admin, ``createsuperuser``) get an
empty profile on first access.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class Profile(BaseModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    name = models.CharField(max_length=50, blank=True, default="")
    phone_number = models.CharField(max_length=30, blank=True, default="")
    profile_image = models.URLField(max_length=500, blank=True, default="")
    account_number = models.CharField(max_length=50, blank=True, default="")
    bank_name = models.CharField(max_length=50, blank=True, default="")

    class Meta:
        db_table = "account_profiles"

    def __str__(self) -> str:
        return self.name or f"profile of user {self.user_id}"
