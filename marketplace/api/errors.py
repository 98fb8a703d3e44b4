"""Translation of business errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from marketplace.core.errors import ErrorCode, MarketplaceError, TransientFailureError, ValidationError

logger = logging.getLogger(__name__)

HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EMPTY_CART: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_TRANSITION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RESTAURANT_CLOSED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ITEM_UNAVAILABLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FOREIGN_RESTAURANT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ADDRESS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FORBIDDEN_OPERATION: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.DELIVERER_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.CONCURRENT_MODIFICATION: status.HTTP_409_CONFLICT,
    ErrorCode.TRANSIENT_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(exc: MarketplaceError, status_code: int | None = None) -> JSONResponse:
    code = status_code or HTTP_STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=code, content={"error": exc.to_dict()})


async def handle_marketplace_error(request: Request, exc: MarketplaceError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code.value, exc.message)
    return error_response(exc)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    field: str | None = None
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None
        message = str(first.get("msg", message))
    return error_response(
        ValidationError(message, field=field),
        status_code=422,
    )


async def handle_store_failure(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Store failure while handling %s %s", request.method, request.url.path)
    return error_response(TransientFailureError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, handle_marketplace_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    for exc_class in (OperationalError, DisconnectionError, PoolTimeoutError):
        app.add_exception_handler(exc_class, handle_store_failure)
