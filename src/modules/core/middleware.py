"""Request correlation for the structured logs.

Each request gets an ID, taken from ``X-Request-ID`` when the terminal or
the reverse proxy supplies one and minted as a UUID4 otherwise.  It is
bound into structlog's context vars so every log line of the request
carries it, and echoed back in the response header.
"""

import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"

logger = structlog.get_logger()


def resolve_correlation_id(request: HttpRequest) -> str:
    return request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())


class CorrelationIdMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = resolve_correlation_id(request)
        # Authentication later adds account_id/role/station to this context
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        started = time.monotonic()
        logger.info("request.started", method=request.method, path=request.path)
        response = self.get_response(request)
        logger.info(
            "request.finished",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )

        response[REQUEST_ID_HEADER] = cid
        return response
