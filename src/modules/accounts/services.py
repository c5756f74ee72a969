"""Account service layer (Use Cases).

Business rules enforced here:
- An email address can back only one account; it doubles as the login
  username for the token endpoint.
- Passwords pass Django's ``AUTH_PASSWORD_VALIDATORS`` and are stored
  hashed by ``set_password``.
- Changing a password requires the current one.
- Profile edits only touch the fields that were sent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.accounts.exceptions import (
    EmailAlreadyRegistered,
    IncorrectPassword,
    InvalidAccountData,
    UserNotFound,
)
from modules.accounts.models import Profile

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

    from modules.accounts.dtos import (
        ChangePasswordDTO,
        CreateUserDTO,
        UpdateBankInfoDTO,
        UpdateProfileDTO,
    )
    from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


def _check_password_policy(password: str, user: AbstractBaseUser) -> None:
    try:
        validate_password(password, user=user)
    except ValidationError as exc:
        raise InvalidAccountData(" ".join(exc.messages)) from exc


def _validate_profile(profile: Profile) -> None:
    try:
        profile.full_clean(exclude=["user"])
    except ValidationError as exc:
        messages = [
            f"{field}: {' '.join(errors)}"
            for field, errors in exc.message_dict.items()
        ]
        raise InvalidAccountData("; ".join(messages)) from exc


class AccountService:
    """Application service for registration and profile management.

    Receives an ``IUserRepository`` via constructor injection (DIP).
    """

    def __init__(self, user_repository: IUserRepository) -> None:
        self._repo = user_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def register(self, dto: CreateUserDTO) -> Profile:
        """Create an account and its profile.

        Raises:
            EmailAlreadyRegistered: if the email is already in use.
            InvalidAccountData: if the password or profile data is rejected.
        """
        email = str(dto.email)
        if self._repo.email_taken(email):
            logger.warning("account.duplicate_email")
            raise EmailAlreadyRegistered("Email already registered.")

        candidate = get_user_model()(username=email, email=email)
        _check_password_policy(dto.password, candidate)

        profile = Profile(
            name=dto.name,
            phone_number=dto.phone_number,
            profile_image=dto.profile_image,
            account_number=dto.account_number,
            bank_name=dto.bank_name,
        )
        _validate_profile(profile)

        profile = self._repo.create(email, dto.password, profile)
        logger.info("account.registered", user_id=profile.user_id)
        return profile

    @transaction.atomic
    def update_profile(self, user_id: Any, dto: UpdateProfileDTO) -> Profile:
        profile = self.get_profile(user_id)
        changes = dto.changes()
        for field, value in changes.items():
            setattr(profile, field, value)
        _validate_profile(profile)
        self._repo.save_profile(profile, update_fields=list(changes))
        logger.info("account.profile_updated", user_id=user_id, fields=sorted(changes))
        return profile

    @transaction.atomic
    def update_bank_info(self, user_id: Any, dto: UpdateBankInfoDTO) -> Profile:
        profile = self.get_profile(user_id)
        profile.account_number = dto.account_number
        profile.bank_name = dto.bank_name
        self._repo.save_profile(profile, update_fields=["account_number", "bank_name"])
        logger.info("account.bank_info_updated", user_id=user_id)
        return profile

    @transaction.atomic
    def change_password(self, user_id: Any, dto: ChangePasswordDTO) -> None:
        """Replace the password after checking the current one.

        Raises:
            UserNotFound: if the user is missing or inactive.
            IncorrectPassword: if ``current_password`` does not match.
            InvalidAccountData: if the new password fails the validators.
        """
        user = self._get_user(user_id)
        if not user.check_password(dto.current_password):
            logger.warning("account.password_change_rejected", user_id=user_id)
            raise IncorrectPassword("Current password is incorrect.")
        _check_password_policy(dto.new_password, user)
        user.set_password(dto.new_password)
        self._repo.save_password(user)
        logger.info("account.password_changed", user_id=user_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_profile(self, user_id: Any) -> Profile:
        """Raises ``UserNotFound`` for missing or inactive users."""
        return self._repo.get_profile(self._get_user(user_id))

    def _get_user(self, user_id: Any) -> AbstractBaseUser:
        user = self._repo.get_by_id(user_id)
        if not user:
            raise UserNotFound(f"User {user_id} not found.")
        return user
