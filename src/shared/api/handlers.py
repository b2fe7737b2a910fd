"""Map the GlowMart error taxonomy onto HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.exceptions import (
    EmptyCart,
    Forbidden,
    GlowMartError,
    InvalidTransition,
    ObjectNotFoundError,
    StockShortfall,
    StorageFailure,
    ValidationError,
)

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES: dict[type[GlowMartError], int] = {
    ValidationError: 400,
    EmptyCart: 400,
    Forbidden: 403,
    ObjectNotFoundError: 404,
    StockShortfall: 409,
    InvalidTransition: 409,
    StorageFailure: 503,
}


def error_body(exc: GlowMartError) -> dict:
    body = {"error": exc.code}
    if isinstance(exc, ValidationError):
        body["messages"] = exc.messages
    elif isinstance(exc, StockShortfall):
        body["status"] = "failed"
        body["shortfalls"] = [shortfall.to_dict() for shortfall in exc.shortfalls]
    elif isinstance(exc, InvalidTransition):
        body["current"] = exc.current
        body["requested"] = exc.requested
    elif isinstance(exc, StorageFailure):
        body["detail"] = "Temporarily unable to complete the request; nothing was changed"
    elif not isinstance(exc, EmptyCart):
        body["detail"] = str(exc)
    return body


async def glowmart_error_handler(request: Request, exc: GlowMartError) -> JSONResponse:
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500,
    )
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.code)
    return JSONResponse(status_code=status_code, content=error_body(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GlowMartError, glowmart_error_handler)
