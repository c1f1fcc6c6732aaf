"""Maps domain and infrastructure failures onto HTTP responses.

Every error response has the body ``{"error", "message", "retryable", ...}``.
Protean's own handlers are registered first so any exception type not
overridden here keeps its default mapping.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers
from sqlalchemy.exc import OperationalError

from storefront.errors import InvalidInput, NotFound, StockConflict, StorefrontError, StoreUnavailable

logger = structlog.get_logger(__name__)


def error_response(error: StorefrontError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def _storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.kind, message=exc.message)
    else:
        logger.info("Request rejected", path=request.url.path, error=exc.kind, message=exc.message)
    return error_response(exc)


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    messages = exc.messages if isinstance(exc.messages, dict) else {"_entity": [str(exc.messages)]}
    first = next((f"{field}: {errs[0]}" for field, errs in messages.items() if errs), "Invalid input")
    return error_response(InvalidInput(first, fields=messages))


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = {".".join(str(p) for p in err["loc"] if p != "body"): err["msg"] for err in exc.errors()}
    return error_response(InvalidInput("Invalid request", fields=fields))


async def _object_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return error_response(NotFound(str(exc) or "Not found"))


async def _version_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    return error_response(StockConflict("The record changed while the request was in flight"))


async def _store_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Store unavailable", path=request.url.path, error=str(exc))
    return error_response(StoreUnavailable("The store is temporarily unavailable, please retry"))


def register_exception_handlers(app: FastAPI) -> None:
    register_protean_handlers(app)

    app.add_exception_handler(StorefrontError, _storefront_error)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(ObjectNotFoundError, _object_not_found)
    app.add_exception_handler(ExpectedVersionError, _version_conflict)
    app.add_exception_handler(OperationalError, _store_unavailable)
    app.add_exception_handler(ConnectionError, _store_unavailable)
