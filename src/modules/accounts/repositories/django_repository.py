"""Django ORM implementation of the User repository."""

from __future__ import annotations

from typing import Any, Iterable, Optional

import structlog
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AbstractBaseUser
from django.core.exceptions import ValidationError

from modules.accounts.models import Profile
from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class UserDjangoRepository(IUserRepository):
    """Looks users up in ``AUTH_USER_MODEL``."""

    def get_by_id(self, id: Any) -> Optional[AbstractBaseUser]:
        """Return ``None`` for missing, inactive or malformed IDs."""
        User = get_user_model()
        try:
            return User.objects.filter(pk=id, is_active=True).first()
        except (ValueError, TypeError, ValidationError):
            return None

    def email_taken(self, email: str) -> bool:
        User = get_user_model()
        return (
            User.objects.filter(email__iexact=email).exists()
            or User.objects.filter(username__iexact=email).exists()
        )

    def create(self, email: str, password: str, profile: Profile) -> Profile:
        user = get_user_model().objects.create_user(
            username=email, email=email, password=password
        )
        profile.user = user
        profile.save()
        logger.info("account.saved", user_id=user.pk)
        return profile

    def get_profile(self, user: AbstractBaseUser) -> Profile:
        profile, created = Profile.objects.select_related("user").get_or_create(
            user=user
        )
        if created:
            logger.info("account.profile_initialised", user_id=user.pk)
        return profile

    def save_profile(self, profile: Profile, update_fields: Iterable[str]) -> Profile:
        profile.save(update_fields=list(update_fields))
        return profile

    def save_password(self, user: AbstractBaseUser) -> None:
        user.save(update_fields=["password"])
