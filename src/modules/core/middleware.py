import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

Handler = Callable[[HttpRequest], HttpResponse]


def correlation_id_middleware(get_response: Handler) -> Handler:
    """Bind a per-request correlation ID into structlog's contextvars.

    A client-supplied ``X-Request-ID`` is honoured; otherwise a fresh UUID4
    is used.  The ID is echoed on the response so callers can quote it when
    reporting an order problem.
    """

    def middleware(request: HttpRequest) -> HttpResponse:
        correlation_id = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())
        request.correlation_id = correlation_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            method=request.method,
            path=request.path,
        )

        started = time.monotonic()
        response = get_response(request)
        logger.info(
            "http.request",
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )

        response[REQUEST_ID_HEADER] = correlation_id
        return response

    return middleware
