"""Translate domain errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from agora_stage.core.errors import AgoraError, ErrorCode, ErrorKind, InternalError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STATE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def agora_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render an :class:`AgoraError` as ``{"code", "detail"}`` with a mapped status."""
    if not isinstance(exc, AgoraError):
        exc = InternalError(ErrorCode.INTERNAL_ERROR, repr(exc))
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Internal error on %s %s: %r", request.method, request.url.path, exc)
        # Internal details stay in the log.
        detail = "Internal server error"
    else:
        detail = exc.detail
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code.value, "detail": detail},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AgoraError, agora_error_handler)
