"""
Request correlation ids.

A caller-supplied ``X-Request-ID`` (or ``X-Correlation-ID``) is reused when it
is well formed; otherwise a fresh UUID is issued. The id is bound to every log
record and SQL statement of the request and returned in ``X-Request-ID``.
"""

import re
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ...infrastructure.logging import Timer, set_correlation_id

logger = structlog.get_logger()

REQUEST_ID_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# Ids are written into logs and SQL comments verbatim
_WELL_FORMED = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def _request_id(request: Request) -> str:
    for header in REQUEST_ID_HEADERS:
        value = request.headers.get(header)
        if value is not None:
            return value if _WELL_FORMED.match(value) else str(uuid4())
    return str(uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _request_id(request)
        set_correlation_id(request_id)

        with structlog.contextvars.bound_contextvars(
            method=request.method, path=request.url.path
        ), Timer() as timer:
            response = await call_next(request)
            logger.info(
                "Request handled",
                status_code=response.status_code,
                duration_ms=timer.duration_ms,
            )

        response.headers["X-Request-ID"] = request_id
        return response
