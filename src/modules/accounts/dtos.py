"""Account DTOs: registration, profile edits and the profile projection.

camelCase on the wire like the other modules.  Password strength follows
the storefront rule (8-20 characters with upper case, lower case, a digit
and one of ``@$!%*?&``); Django's ``AUTH_PASSWORD_VALIDATORS`` run on top
of it in the service.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from modules.accounts.models import Profile

PASSWORD_RULE = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,20}$"
)
PASSWORD_RULE_MESSAGE = (
    "Password must be 8-20 characters and include upper and lower case "
    "letters, a digit and one of @$!%*?&."
)


class _CamelDTO(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _check_password(v: str) -> str:
    if not PASSWORD_RULE.match(v):
        raise ValueError(PASSWORD_RULE_MESSAGE)
    return v


class CreateUserDTO(_CamelDTO):
    email: EmailStr
    password: str
    name: str = Field(min_length=2, max_length=50)
    phone_number: str = Field(default="", max_length=30)
    profile_image: str = Field(default="", max_length=500)
    account_number: str = Field(default="", max_length=50)
    bank_name: str = Field(default="", max_length=50)

    @field_validator("password")
    @classmethod
    def password_is_strong(cls, v: str) -> str:
        return _check_password(v)


class UpdateProfileDTO(_CamelDTO):
    """Only non-null fields are applied."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    profile_image: Optional[str] = Field(default=None, max_length=500)

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class UpdateBankInfoDTO(_CamelDTO):
    account_number: str = Field(min_length=1, max_length=50)
    bank_name: str = Field(min_length=1, max_length=50)


class ChangePasswordDTO(_CamelDTO):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_is_strong(cls, v: str) -> str:
        return _check_password(v)


class ProfileOutputDTO(_CamelDTO):
    id: int
    email: str
    name: str
    phone_number: str
    profile_image: Optional[str]
    account_number: str
    bank_name: str
    date_joined: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, profile: Profile) -> ProfileOutputDTO:
        user = profile.user
        return cls(
            id=user.pk,
            email=user.email,
            name=profile.name,
            phone_number=profile.phone_number,
            profile_image=profile.profile_image or None,
            account_number=profile.account_number,
            bank_name=profile.bank_name,
            date_joined=user.date_joined,
            updated_at=profile.updated_at,
        )
