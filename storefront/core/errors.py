"""
Error handling utilities and FastAPI exception handlers
"""

import traceback
from typing import Any, Dict, List

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.config import config
from storefront.core.logger import logger
from storefront.core.responses import ApiResponse


class ErrorResponse(Exception):
    """Custom exception for application errors"""

    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ErrorResponse):
    """Raised when a resource addressed by a route key does not exist"""

    def __init__(self, message: str = "Item not found.", details: dict = None):
        super().__init__(message, status_code=404, details=details)


def _request_metadata(request: Request, event: str, status_code: int) -> Dict[str, Any]:
    metadata = {
        "event": event,
        "status_code": status_code,
        "url": str(request.url),
        "method": request.method,
    }
    if config.environment == "development":
        metadata["traceback"] = traceback.format_exc()
    return metadata


def format_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic validation errors by dotted field path"""
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        grouped.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return grouped


async def error_response_handler(request: Request, exc: ErrorResponse):
    """Handler for custom ErrorResponse exceptions"""
    metadata = _request_metadata(request, "error_response", exc.status_code)
    metadata.update(exc.details)

    if exc.status_code >= 500:
        logger.error(f"Error: {exc.message}", metadata=metadata)
    else:
        logger.warning(f"Error: {exc.message}", metadata=metadata)

    return ApiResponse.error(exc.message, exc.status_code, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handler for FastAPI/Starlette HTTPException"""
    logger.warning(
        f"HTTPException: {exc.detail}",
        metadata=_request_metadata(request, "http_exception", exc.status_code),
    )

    message = exc.detail
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Item not found."

    return ApiResponse.error(str(message), exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request validation failures"""
    errors = format_validation_errors(exc.errors())
    logger.warning(
        "Request validation failed",
        metadata={"event": "validation_error", "url": str(request.url), "fields": list(errors)},
    )
    return ApiResponse.error("Validation failed. Please check the form fields.", 422, errors)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handler for slowapi rate limit violations"""
    logger.warning(
        f"Rate limit exceeded: {exc.detail}",
        metadata={"event": "rate_limit_exceeded", "url": str(request.url)},
    )
    return ApiResponse.error("Too many requests. Please try again later.", 429)


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler so unexpected failures still use the error envelope"""
    logger.error(
        f"Unhandled error: {exc}",
        error=exc,
        metadata=_request_metadata(request, "unhandled_exception", 500),
    )
    return ApiResponse.error("An unexpected error occurred. Please try again.", 500)
