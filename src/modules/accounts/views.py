"""Account API views.

Registration is public; everything under ``/profile/`` acts on the
authenticated caller.  Domain exceptions are translated explicitly into
HTTP status codes.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.accounts.dtos import (
    ChangePasswordDTO,
    CreateUserDTO,
    ProfileOutputDTO,
    UpdateBankInfoDTO,
    UpdateProfileDTO,
)
from modules.accounts.exceptions import (
    EmailAlreadyRegistered,
    IncorrectPassword,
    InvalidAccountData,
    UserNotFound,
)
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.services import AccountService
from modules.core.api import bad_request, dump, error_response, not_found, parse_dto


def _service() -> AccountService:
    return AccountService(user_repository=UserDjangoRepository())


class UserViewSet(GenericViewSet):
    """``POST /api/v1/users/``: sign up with email and password."""

    permission_classes = [AllowAny]
    throttle_scope = "registration"

    def create(self, request: Request) -> Response:
        dto, error = parse_dto(CreateUserDTO, request.data)
        if error:
            return error

        try:
            profile = _service().register(dto)
        except EmailAlreadyRegistered as exc:
            return error_response(str(exc), status.HTTP_409_CONFLICT)
        except InvalidAccountData as exc:
            return bad_request(str(exc))

        return Response(
            dump(ProfileOutputDTO.from_entity(profile)),
            status=status.HTTP_201_CREATED,
        )


class ProfileView(APIView):
    """``GET`` / ``PUT /api/v1/profile/`` for the caller's own profile."""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        try:
            profile = _service().get_profile(request.user.pk)
        except UserNotFound:
            return not_found("User not found.")
        return Response(dump(ProfileOutputDTO.from_entity(profile)))

    def put(self, request: Request) -> Response:
        dto, error = parse_dto(UpdateProfileDTO, request.data)
        if error:
            return error

        try:
            profile = _service().update_profile(request.user.pk, dto)
        except UserNotFound:
            return not_found("User not found.")
        except InvalidAccountData as exc:
            return bad_request(str(exc))
        return Response(dump(ProfileOutputDTO.from_entity(profile)))


class BankInfoView(APIView):
    """``PUT /api/v1/profile/bank-info/``"""

    permission_classes = [IsAuthenticated]

    def put(self, request: Request) -> Response:
        dto, error = parse_dto(UpdateBankInfoDTO, request.data)
        if error:
            return error

        try:
            profile = _service().update_bank_info(request.user.pk, dto)
        except UserNotFound:
            return not_found("User not found.")
        return Response(dump(ProfileOutputDTO.from_entity(profile)))


class ChangePasswordView(APIView):
    """``PUT /api/v1/profile/password/``; existing tokens stay valid."""

    permission_classes = [IsAuthenticated]

    def put(self, request: Request) -> Response:
        dto, error = parse_dto(ChangePasswordDTO, request.data)
        if error:
            return error

        try:
            _service().change_password(request.user.pk, dto)
        except UserNotFound:
            return not_found("User not found.")
        except (IncorrectPassword, InvalidAccountData) as exc:
            return bad_request(str(exc))
        return Response({"success": True})
