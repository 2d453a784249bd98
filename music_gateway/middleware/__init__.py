# ABOUTME: Middleware package initialization
# ABOUTME: Exports request logging and CORS middleware for the gateway

from .logging import LoggingMiddleware, get_client_ip
from .cors import EnhancedCORSMiddleware

__all__ = [
    "LoggingMiddleware",
    "EnhancedCORSMiddleware",
    "get_client_ip",
]
