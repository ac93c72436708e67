"""Request context middleware: assigns a unique ID to every request.

Concurrent requests interleave their log lines; tagging every record with
the request id makes one request's story greppable.  The id lives in a
ContextVar so any code in the call chain (including the synchronous
endpoints FastAPI runs in its thread pool, which copy the context) can read
it without passing it through every function.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")


def accept_request_id(value: str | None) -> str:
    """Reuse a well-formed client id, otherwise mint a fresh uuid4.

    Client ids end up in every log line of the request, so anything long or
    containing whitespace or control characters is replaced.
    """
    if value and _CLIENT_ID_RE.match(value):
        return value
    return str(uuid.uuid4())


def _completion_level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code in (401, 403):
        return logging.WARNING
    return logging.INFO


class _RequestContextFilter(logging.Filter):
    """Inject the current request id into every LogRecord.

    A filter (not a formatter) because only filters can add fields to the
    record before it is formatted.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        return True


def install_request_id_filter() -> None:
    """Attach the filter to the root logger and its handlers, once."""
    root_logger = logging.getLogger()
    if not any(isinstance(f, _RequestContextFilter) for f in root_logger.filters):
        root_logger.addFilter(_RequestContextFilter())
    # Root-logger filters do not run for records propagated from child
    # loggers, so handlers get one too.
    for handler in root_logger.handlers:
        if not any(isinstance(f, _RequestContextFilter) for f in handler.filters):
            handler.addFilter(_RequestContextFilter())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, and log a completion line.

    A well-formed X-Request-ID from the client is reused; the id is echoed
    back on the response for correlation.  The completion line is logged at
    WARNING for 401/403 and ERROR for 5xx.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = accept_request_id(request.headers.get("x-request-id"))
        token = request_id_var.set(req_id)
        try:
            start = time.monotonic()
            response = await call_next(request)
            duration_ms = round((time.monotonic() - start) * 1000, 1)

            logger.log(
                _completion_level(response.status_code),
                "%s %s -> %d (%.1fms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
            response.headers["X-Request-ID"] = req_id
            return response
        finally:
            request_id_var.reset(token)
