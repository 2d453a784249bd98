# ABOUTME: This file defines Pydantic models for API response payloads.
# ABOUTME: Field names follow the camelCase JSON contract consumed by the web client.

from typing import Optional, Literal
from pydantic import BaseModel, Field


class MusicGenerationResponse(BaseModel):
    audioData: str = Field(..., description="Base64 encoded audio, passed through unmodified")


class HealthStatus(BaseModel):
    status: Literal['ok', 'error']
    message: str


class DebugStatus(BaseModel):
    status: Literal['ok', 'error']
    project: Optional[str]
    location: str
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str]
    credentialsFileExists: bool


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: Optional[str] = None
    retryAfterMs: Optional[int] = Field(None, ge=0)
