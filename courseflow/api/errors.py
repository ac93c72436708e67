"""Map the domain error taxonomy onto HTTP responses.

One handler for every DomainError subclass; the body is always

    {"detail": {"error": <code>, "message": <text>, ...details}}

so clients can branch on ``error`` without parsing messages.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from courseflow.core.errors import DomainError

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[str, int] = {
    "validation_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "invalid_transition": status.HTTP_409_CONFLICT,
    "conflict": status.HTTP_409_CONFLICT,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "store_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def domain_error_response(exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": {"error": exc.code, "message": exc.message, **exc.details()}
        },
        headers=headers,
    )


async def _handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, DomainError):
        raise exc
    if exc.code == "store_unavailable":
        logger.error("Store unavailable during %s %s", request.method, request.url.path)
    return domain_error_response(exc)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _handle_domain_error)
