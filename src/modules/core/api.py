"""Helpers shared by the module API views.

Every error body has the shape ``{"detail": ...}``; domain views may add
extra keys (e.g. ``available`` for stock failures).
"""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.response import Response

DTO = TypeVar("DTO", bound=BaseModel)


def error_response(detail: str, http_status: int, **extra: Any) -> Response:
    return Response({"detail": detail, **extra}, status=http_status)


def not_found(detail: str) -> Response:
    return error_response(detail, status.HTTP_404_NOT_FOUND)


def bad_request(detail: str, **extra: Any) -> Response:
    return error_response(detail, status.HTTP_400_BAD_REQUEST, **extra)


def format_validation_error(exc: PydanticValidationError) -> str:
    """Flatten Pydantic errors into ``"field: message; ..."``."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        message = error["msg"].removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


def parse_dto(
    dto_class: Type[DTO], data: Any
) -> tuple[Optional[DTO], Optional[Response]]:
    """Validate ``data`` into ``dto_class``.

    Returns ``(dto, None)`` on success and ``(None, 400 response)`` otherwise.
    """
    if data is None:
        data = {}
    if hasattr(data, "dict") and not isinstance(data, dict):
        # QueryDict: keep the last value for every key
        data = data.dict()
    try:
        return dto_class.model_validate(data), None
    except PydanticValidationError as exc:
        return None, bad_request(format_validation_error(exc))


def dump(dto: BaseModel) -> dict:
    """Serialize an output DTO to camelCase JSON-ready data."""
    return dto.model_dump(mode="json", by_alias=True)
