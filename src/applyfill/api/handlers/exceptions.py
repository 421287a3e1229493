"""
Exception Handlers for FastAPI Application.

Custom exception handlers that turn validation and precondition errors into
user-friendly JSON responses for the browser extension.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from applyfill.utils.exceptions import InvalidRequestError
from applyfill.utils.logger import get_logger

logger = get_logger(__name__)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors and return detailed error messages.

    Args:
        request: FastAPI Request object.
        exc: RequestValidationError containing validation error details.

    Returns:
        JSONResponse with status 422 containing:
            - detail: List of validation errors with field paths and messages
            - message: User-friendly error message
    """
    error_details = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    logger.error(
        "Validation error",
        extra={
            "extra_fields": {
                "validation_errors": error_details,
                "http_path": request.url.path if request else None,
            }
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content={
            "detail": error_details,
            "message": "Validation error: Please check your input data",
        },
    )


async def invalid_request_handler(
    request: Request, exc: InvalidRequestError
) -> JSONResponse:
    """Handle precondition violations (e.g., a missing user) with a 400 response."""
    logger.warning(
        "Invalid request",
        extra={
            "extra_fields": {
                "error": str(exc),
                "http_path": request.url.path if request else None,
            }
        },
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "message": "Invalid request"},
    )
