# ABOUTME: CORS middleware with environment-driven configuration
# ABOUTME: Wraps Starlette's CORSMiddleware with origins taken from Settings.cors_allow_origins

import logging
from typing import Optional, Sequence
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp

from music_gateway.config import get_settings

logger = logging.getLogger(__name__)


class EnhancedCORSMiddleware:
    """
    CORS middleware wrapper that provides environment-driven configuration.

    The browser client calls the gateway directly, so the default allows
    every origin. Credentials are only allowed for an explicit origin list.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_origins: Optional[Sequence[str]] = None,
        allow_methods: Optional[Sequence[str]] = None,
        allow_headers: Optional[Sequence[str]] = None,
        expose_headers: Optional[Sequence[str]] = None,
        max_age: int = 600,
    ):
        if allow_origins is None:
            allow_origins = get_settings().cors_allow_origins

        if allow_methods is None:
            allow_methods = ["GET", "POST", "OPTIONS"]

        if allow_headers is None:
            allow_headers = ["Accept", "Content-Type", "X-Request-ID"]

        if expose_headers is None:
            expose_headers = ["X-Request-ID", "Retry-After", "X-Process-Time"]

        allow_credentials = bool(allow_origins) and "*" not in allow_origins

        self.cors_middleware = CORSMiddleware(
            app,
            allow_origins=allow_origins,
            allow_credentials=allow_credentials,
            allow_methods=allow_methods,
            allow_headers=allow_headers,
            expose_headers=expose_headers,
            max_age=max_age,
        )

        logger.info(
            "CORS middleware configured",
            extra={
                "allow_origins": list(allow_origins),
                "allow_credentials": allow_credentials,
                "allow_methods": list(allow_methods),
                "max_age": max_age,
            }
        )

        if "*" in allow_origins:
            logger.warning("CORS configured with wildcard origin")

    async def __call__(self, scope, receive, send):
        """ASGI application interface."""
        return await self.cors_middleware(scope, receive, send)
