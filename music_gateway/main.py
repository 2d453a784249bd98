# ABOUTME: FastAPI application instance with middleware and exception handlers
# ABOUTME: Main entry point wiring CORS, logging, monitoring, gateway errors, and routers
import math
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from music_gateway.config import get_settings
from music_gateway.logging_config import get_logger
from music_gateway.middleware import LoggingMiddleware, EnhancedCORSMiddleware
from music_gateway.models.errors import (
    PromptValidationError,
    InvalidPromptError,
    ServerBusyError,
    GenerationFailedError,
)
from music_gateway.models.responses import ErrorResponse
from music_gateway.monitoring import PrometheusMetrics, add_monitoring_middleware
from music_gateway.routes import music, health, metrics

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = get_settings()
    PrometheusMetrics()

    logger.info("server_started", port=settings.port)
    logger.info(
        "credentials_status",
        GOOGLE_APPLICATION_CREDENTIALS=settings.credentials_path,
        exists=settings.credentials_file_exists,
    )
    logger.info(
        "vertex_config",
        default_model=settings.default_model,
        project=settings.project,
        location=settings.location,
        max_attempts=settings.max_attempts,
        min_interval_ms=settings.min_interval_ms,
    )

    yield

    logger.info("server_stopped")


settings = get_settings()
app = FastAPI(
    title="Music Generation Gateway",
    description="Forwards text prompts to a Vertex AI music model and returns Base64 audio",
    version="1.0.0",
    lifespan=lifespan
)

# Middleware stack - applied in reverse order of registration
# Order: CORS -> Monitoring -> Logging -> Request Processing
app.add_middleware(LoggingMiddleware)
add_monitoring_middleware(app)
app.add_middleware(EnhancedCORSMiddleware, allow_origins=settings.cors_allow_origins)


def _request_id_headers(request: Request) -> dict:
    return {"X-Request-ID": getattr(request.state, "request_id", "")}


# Exception handlers
@app.exception_handler(PromptValidationError)
async def prompt_validation_handler(request: Request, exc: PromptValidationError):
    """Handle rejected prompts (400)"""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="Invalid prompt",
            code=exc.code,
            detail=str(exc),
        ).model_dump(exclude_none=True),
        headers=_request_id_headers(request)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and non-string prompts are reported as invalid prompts (400)"""
    return await prompt_validation_handler(request, InvalidPromptError("Invalid prompt"))


@app.exception_handler(ServerBusyError)
async def server_busy_handler(request: Request, exc: ServerBusyError):
    """Handle busy gate rejections (429)"""
    headers = _request_id_headers(request)
    headers["Retry-After"] = str(math.ceil(exc.retry_after_ms / 1000))
    return JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error="Server busy",
            code="SERVER_BUSY",
            detail=str(exc),
            retryAfterMs=exc.retry_after_ms,
        ).model_dump(exclude_none=True),
        headers=headers
    )


@app.exception_handler(GenerationFailedError)
async def generation_failed_handler(request: Request, exc: GenerationFailedError):
    """Handle upstream generation failures (500)"""
    logger.error(
        "generation_error_response",
        code=exc.code,
        detail=str(exc),
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Failed to generate music",
            code=exc.code,
            detail=str(exc),
        ).model_dump(exclude_none=True),
        headers=_request_id_headers(request)
    )


# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(music.router, prefix="/api", tags=["music"])
app.include_router(metrics.router, tags=["monitoring"])
