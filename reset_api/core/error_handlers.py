"""HTTP error handlers for FastAPI application.

This module provides the bridge between application exceptions and HTTP responses.
It maps domain-level exceptions to appropriate HTTP status codes and response formats.

Every error body has the shape ``{"message": "..."}``.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from reset_api.exceptions import (
    AppException,
    NotFoundError,
    ValidationInputError,
    PersistenceError,
    InvalidTokenError,
)

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Client-facing message per request field when body validation fails
FIELD_MESSAGES = {
    "email": "Valid email is required",
    "token": "Token and new password are required",
    "newPassword": "Token and new password are required",
}

# Fallback per route when the body is missing or is not a JSON object
ROUTE_MESSAGES = {
    "/forgot-password": "Valid email is required",
    "/reset-password": "Token and new password are required",
}


def _message(content: str) -> dict:
    return {"message": content}


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """
    Map a NotFoundError to an HTTP 404 JSON response.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (NotFoundError): The exception indicating that a requested resource was not found.

    Returns:
        JSONResponse: Response with status 404 and a JSON body `{"message": "<exception message>"}`.
    """
    logger.info(f"{request.url.path}: {exc.resource} not found")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND, content=_message(exc.message)
    )


async def validation_input_handler(
    request: Request, exc: ValidationInputError
) -> JSONResponse:
    """
    Convert a ValidationInputError into an HTTP 400 JSON response.

    The offending field, when known, is logged but not returned.
    """
    field = f" on {exc.field}" if exc.field else ""
    logger.info(f"{request.url.path}: rejected input{field} ({exc.message})")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content=_message(exc.message)
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Turn FastAPI body validation failures into the same 400 shape as ValidationInputError.

    The message is picked from the first offending field. A missing or
    non-object body falls back to the route's message, then to a generic one.
    """
    field = None
    for error in exc.errors():
        loc = error.get("loc", ())
        if len(loc) > 1 and loc[-1] in FIELD_MESSAGES:
            field = loc[-1]
            break
    if field:
        message = FIELD_MESSAGES[field]
    else:
        message = ROUTE_MESSAGES.get(request.url.path, "Invalid request body")
    return await validation_input_handler(
        request, ValidationInputError(message, field=field)
    )


async def invalid_token_handler(
    request: Request, exc: InvalidTokenError
) -> JSONResponse:
    """
    Map InvalidTokenError (and TokenExpiredError) to HTTP 400.

    Returns:
        JSONResponse: Response with status 400 and the exception message.
    """
    logger.info(f"{request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content=_message(exc.message)
    )


async def persistence_error_handler(
    request: Request, exc: PersistenceError
) -> JSONResponse:
    logger.error(f"{request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_message(exc.message),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle unhandled application-level exceptions and produce a standardized 500 response.

    Returns:
        JSONResponse: HTTP 500 response with content {"message": "Internal server error"}.
    """
    logger.error(f"{request.url.path}: unhandled application error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_message(INTERNAL_ERROR_MESSAGE),
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(f"{request.url.path}: internal server error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_message(INTERNAL_ERROR_MESSAGE),
    )


def register_exception_handlers(app) -> None:
    """
    Register the application's domain-to-HTTP exception handlers on a FastAPI app.

    Mappings: NotFoundError -> 404, ValidationInputError and request body
    validation -> 400, InvalidTokenError/TokenExpiredError -> 400,
    PersistenceError -> 500 with its own message, any other AppException or
    unexpected Exception -> 500 "Internal server error".

    Parameters:
        app: The FastAPI application instance to which the exception handlers will be attached.
    """
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValidationInputError, validation_input_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(InvalidTokenError, invalid_token_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)

    # Catch-all for unhandled application exceptions
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
