# ABOUTME: Monitoring middleware for request tracking and metrics collection
# ABOUTME: Automatically instruments all requests with count and duration metrics
import time
import logging
from typing import Callable
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .metrics import PrometheusMetrics

logger = logging.getLogger(__name__)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """
    Middleware for automatic request monitoring and metrics collection.

    Tracks request duration and counts per route and status.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.metrics = PrometheusMetrics()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        # Skip metrics collection for the metrics endpoint itself
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        method = request.method
        path = request.url.path
        status_code = 500  # Default to error in case of exception

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Process-Time"] = str(round(time.time() - start_time, 4))
            return response
        finally:
            self.metrics.record_request(method, path, status_code, time.time() - start_time)


def add_monitoring_middleware(app: FastAPI) -> None:
    """
    Add monitoring middleware to FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(MonitoringMiddleware)
    logger.info("Monitoring middleware added to FastAPI app")
