"""Map engine errors to HTTP responses.

Body shape: {"detail": <message>, "code": <error code>}.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from travelly.domain.errors import (
    IntegrityError,
    NotFoundError,
    OverpaymentRejectedError,
    ReferentialConflictError,
    StorageUnavailableError,
    TravellyError,
    ValidationError,
)
from travelly.observability.correlation import get_correlation_id
from travelly.observability.logging import get_logger
from travelly.observability.redaction import safe_log_context

logger = get_logger(__name__)

_STATUS_BY_ERROR: list[tuple[type[TravellyError], int]] = [
    (NotFoundError, 404),
    (ValidationError, 422),
    (ReferentialConflictError, 409),
    (StorageUnavailableError, 503),
    (IntegrityError, 500),
]


def status_for(exc: TravellyError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def error_body(exc: TravellyError) -> dict:
    body: dict = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, OverpaymentRejectedError):
        body["outstanding_balance"] = str(exc.outstanding)
    return body


async def travelly_error_handler(request: Request, exc: TravellyError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(
            "request failed",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=get_correlation_id(),
                    path=request.url.path,
                    status=status,
                    code=exc.code,
                    error=str(exc),
                )
            },
        )
    headers = {"Retry-After": "1"} if isinstance(exc, StorageUnavailableError) else None
    return JSONResponse(status_code=status, content=error_body(exc), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TravellyError, travelly_error_handler)
