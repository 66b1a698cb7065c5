"""Exception handlers: guard and service errors -> {code, message} responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dedupguard.exceptions import ClaimBackendError, DuplicateRequestError, ResourceNotFoundError
from dedupguard.models import ErrorCode, ErrorResponse

logger = logging.getLogger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(code=code, message=message).model_dump(),
    )


async def handle_duplicate(request: Request, exc: DuplicateRequestError) -> JSONResponse:
    logger.error(f"Duplication error occurred: {exc.message}")
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.code, exc.message)


async def handle_claim_backend_error(request: Request, exc: ClaimBackendError) -> JSONResponse:
    # Alert on this separately from the duplicate rejection rate
    logger.error(f"Claim backend error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    error = ErrorCode.ERROR_SERVER
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, error.code, error.message)


async def handle_not_found(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    error = ErrorCode.ERROR_NOT_FOUND
    return _error_response(status.HTTP_404_NOT_FOUND, error.code, error.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Invalid input on {request.method} {request.url.path}: {exc.errors()}")
    error = ErrorCode.ERROR_INVALID_INPUT
    return _error_response(status.HTTP_400_BAD_REQUEST, error.code, error.message)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all handlers to the application."""
    app.add_exception_handler(DuplicateRequestError, handle_duplicate)
    app.add_exception_handler(ClaimBackendError, handle_claim_backend_error)
    app.add_exception_handler(ResourceNotFoundError, handle_not_found)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
