"""User repository interface.

Credentials live on Django's ``AUTH_USER_MODEL``; storefront details live
on the one-to-one ``Profile``.  The order workflow only needs
``get_by_id``; registration and profile management use the rest.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Optional

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

    from modules.accounts.models import Profile


class IUserRepository(ABC):
    """Contract over the identity boundary."""

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[AbstractBaseUser]:
        """Retrieve an active user by primary key, or ``None``."""

    @abstractmethod
    def email_taken(self, email: str) -> bool:
        """Case-insensitive check against every account, active or not."""

    @abstractmethod
    def create(self, email: str, password: str, profile: Profile) -> Profile:
        """Create a user (username = email) and attach the unsaved ``profile``."""

    @abstractmethod
    def get_profile(self, user: AbstractBaseUser) -> Profile:
        """Return the user's profile, creating an empty one if missing."""

    @abstractmethod
    def save_profile(self, profile: Profile, update_fields: Iterable[str]) -> Profile: ...

    @abstractmethod
    def save_password(self, user: AbstractBaseUser) -> None:
        """Persist a password already set with ``set_password``."""
