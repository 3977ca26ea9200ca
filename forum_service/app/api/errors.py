"""서비스 예외 -> HTTP 응답 변환."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..exceptions import (
    ConflictError,
    ForbiddenError,
    ForumServiceError,
    NotFoundError,
    TransientStoreError,
    UnauthorizedError,
    ValidationError,
)


logger = logging.getLogger(__name__)

RETRY_LATER_MESSAGE = "잠시 후 다시 시도해 주세요."

_STATUS_BY_ERROR: dict[type[ForumServiceError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    TransientStoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: ForumServiceError) -> int:
    for error_type, code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def forum_error_handler(request: Request, exc: ForumServiceError) -> JSONResponse:
    code = status_for(exc)

    if isinstance(exc, TransientStoreError) or code >= 500:
        # 원인은 운영 로그에만 남기고 응답은 일반 메시지로 대체한다.
        logger.error(
            "store error on %s %s: %s", request.method, request.url.path, exc
        )
        detail = RETRY_LATER_MESSAGE
    else:
        logger.info(
            "request rejected on %s %s status=%d: %s",
            request.method,
            request.url.path,
            code,
            exc,
        )
        detail = str(exc)

    return JSONResponse(status_code=code, content={"detail": detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ForumServiceError, forum_error_handler)
