# ABOUTME: Request/response logging middleware with correlation IDs and structured output
# ABOUTME: Logs every HTTP request with timing and status, and binds the request ID into the log context

import time
import uuid
from typing import Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from music_gateway.logging_config import get_logger, request_id_context

logger = get_logger("music_gateway.requests")


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Args:
        request: The HTTP request object

    Returns:
        Client IP address as string
    """
    # Check for forwarded IP (common in load balancer setups)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for structured request/response logging.

    Logs all HTTP requests with timing information, status codes,
    and correlation IDs for tracing. The request ID is taken from the
    X-Request-ID header when present and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with logging.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware/route handler

        Returns:
            Response with X-Request-ID header set
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        client_ip = get_client_ip(request)

        with request_id_context(request_id):
            logger.info(
                "request_start",
                method=request.method,
                path=request.url.path,
                query_params=str(request.query_params) if request.query_params else None,
                client_ip=client_ip,
                user_agent=request.headers.get("User-Agent", "unknown"),
                content_length=request.headers.get("Content-Length"),
            )

            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "request_error",
                    method=request.method,
                    path=request.url.path,
                    duration_ms=round((time.time() - start_time) * 1000, 2),
                    client_ip=client_ip,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            log_method = getattr(logger, self.get_log_level(response.status_code))
            log_method(
                "request_complete",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.time() - start_time) * 1000, 2),
                client_ip=client_ip,
                response_size=response.headers.get("Content-Length"),
            )

        if "X-Request-ID" not in response.headers:
            response.headers["X-Request-ID"] = request_id

        return response

    @staticmethod
    def get_log_level(status_code: int) -> str:
        """
        Determine appropriate log level based on HTTP status code.

        Args:
            status_code: HTTP response status code

        Returns:
            Log level as string (info, warning, error)
        """
        if status_code < 400:
            return "info"
        elif status_code < 500:
            return "warning"
        else:
            return "error"
