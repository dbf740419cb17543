import time
import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware:
    """Bind a correlation ID to every log line emitted while serving a request.

    Reads the X-Request-ID header or generates a UUID4, binds it into
    structlog's contextvars and echoes it back on the response.  The
    transition endpoint runs the async engine through ``async_to_sync``,
    which copies contextvars, so engine log lines carry the same ID.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        started = time.monotonic()
        response = self.get_response(request)

        logger.info(
            "request_finished",
            method=request.method,
            path=request.get_full_path(),
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )

        response[REQUEST_ID_HEADER] = cid
        return response
