import time
from typing import Any, Callable, Dict, Tuple, Type

import structlog
from django.core.cache import cache
from django.db import DatabaseError, connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

logger = structlog.get_logger(__name__)

HEALTH_CACHE_KEY = "storefront:health"


def _ping_database() -> None:
    connection = connections["default"]
    connection.ensure_connection()
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _ping_cache() -> None:
    cache.set(HEALTH_CACHE_KEY, "ok", 10)
    if cache.get(HEALTH_CACHE_KEY) != "ok":
        raise ConnectionError("Cache round trip returned no value")


# name, ping, exceptions that mark the dependency as down
DEPENDENCY_CHECKS: Tuple[Tuple[str, Callable[[], None], Tuple[Type[Exception], ...]], ...] = (
    ("database", _ping_database, (DatabaseError,)),
    ("cache", _ping_cache, (Exception,)),
)


def health_check(request: HttpRequest) -> JsonResponse:
    """Ping the database and cache; 503 if either is unreachable."""
    services: Dict[str, Dict[str, Any]] = {}
    for name, ping, failures in DEPENDENCY_CHECKS:
        started = time.monotonic()
        try:
            ping()
        except failures:
            logger.exception("health.check_failed", dependency=name)
            services[name] = {"status": "down"}
            continue
        services[name] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - started) * 1000, 2),
        }

    healthy = all(s["status"] == "up" for s in services.values())
    verdict = "healthy" if healthy else "unhealthy"
    logger.info("health.checked", status=verdict)
    return JsonResponse(
        {
            "status": verdict,
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if healthy else 503,
    )


class CurrentUserView(APIView):
    """Echo back the account a bearer token resolves to (401 otherwise)."""

    permission_classes = [IsAuthenticated]

    def get(self, request: HttpRequest) -> Response:
        user = request.user
        return Response({"id": user.pk, "username": user.get_username()})
