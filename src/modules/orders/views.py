"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.
Every look-up is scoped to the authenticated user, so another user's
order is indistinguishable from a missing one (404).
"""

from __future__ import annotations

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.exceptions import UserNotFound
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.core.api import bad_request, dump, not_found, parse_dto
from modules.orders.dtos import (
    CancelOrderDTO,
    CreateOrderDTO,
    OrderListQueryDTO,
    OrderOutputDTO,
)
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidOrderStatus,
    OrderNotFound,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.exceptions import ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).  Does **not**
    extend ``ModelViewSet``: all ORM access goes through the
    service/repository layer.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            user_repository=UserDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Pick the throttle scope for the current action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        dto, error = parse_dto(CreateOrderDTO, request.data)
        if error:
            return error

        try:
            order = self._service.create_order(request.user.pk, dto)
        except UserNotFound:
            return not_found("User not found.")
        except ProductNotFound as exc:
            return not_found(str(exc))
        except InsufficientStock as exc:
            return bad_request(str(exc), available=exc.available)

        return Response(dump(OrderOutputDTO.from_entity(order)))

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/?status=&search=&page=&limit="""
        query, error = parse_dto(OrderListQueryDTO, request.query_params)
        if error:
            return error

        page = self._service.list_orders_by_user(request.user.pk, query)
        return Response(dump(page))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order_detail(pk, request.user.pk)
        except OrderNotFound:
            return not_found("Order not found.")
        return Response(dump(OrderOutputDTO.from_entity(order)))

    # ------------------------------------------------------------------
    # Cancel (dedicated action)
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/

        Cancels an order and restores its reserved stock.
        """
        dto, error = parse_dto(CancelOrderDTO, request.data)
        if error:
            return error

        try:
            order = self._service.cancel_order(pk, request.user.pk, reason=dto.reason)
        except OrderNotFound:
            return not_found("Order not found.")
        except InvalidOrderStatus as exc:
            return bad_request(str(exc))

        return Response(dump(OrderOutputDTO.from_entity(order)))
