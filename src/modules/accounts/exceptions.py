"""Account domain exceptions."""

from __future__ import annotations


class UserNotFound(Exception):
    """The user referenced by the request does not exist or is inactive."""


class EmailAlreadyRegistered(Exception):
    """Another account already uses this email address."""


class IncorrectPassword(Exception):
    """The current password supplied for a password change is wrong."""


class InvalidAccountData(Exception):
    """Rejected by Django's password validators or model validation."""
