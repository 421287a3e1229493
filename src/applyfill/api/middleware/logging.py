"""
Request Logging Middleware.

Logs every HTTP request and response with structured context and sets the
request correlation ID for all records emitted while handling it.
"""

import time
from typing import Any

from fastapi import Request

from applyfill.utils.logger import clear_correlation_ids, get_logger, set_correlation_id

logger = get_logger(__name__)


def get_client_ip(request: Request) -> str:
    """Client IP, preferring proxy headers (API Gateway / load balancers)."""
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP", "")
    if real_ip:
        return real_ip
    return request.client.host if request.client else ""


async def log_requests_middleware(request: Request, call_next: Any) -> Any:
    """Log all incoming HTTP requests with structured context.

    Args:
        request: FastAPI Request object containing request details.
        call_next: Callable that processes the request and returns the response.

    Returns:
        Response: The response from the next middleware/handler.
    """
    start_time = time.time()
    clear_correlation_ids()
    set_correlation_id(request_id=request.headers.get("X-Request-ID"))

    logger.info(
        "HTTP request",
        extra={
            "extra_fields": {
                "http_method": request.method,
                "http_path": request.url.path,
                "client_ip": get_client_ip(request),
                "user_agent": request.headers.get("User-Agent", ""),
                "extension_version": request.headers.get("X-Extension-Version"),
            }
        },
    )

    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000

    logger.info(
        "HTTP response",
        extra={
            "extra_fields": {
                "http_method": request.method,
                "http_path": request.url.path,
                "http_status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            }
        },
    )

    return response
