# ABOUTME: This file defines Pydantic models for API request payloads.
# ABOUTME: Prompt bounds are checked by the gateway so each failure maps to its own error code.

from typing import Any, Optional
from pydantic import BaseModel, Field

MAX_PROMPT_LENGTH = 500


class MusicGenerationRequest(BaseModel):
    prompt: Optional[str] = Field(None, description="Text describing the music to generate")
    # Anything other than a non-blank string falls back to VERTEX_MODEL
    model: Optional[Any] = Field(None, description="Vertex model override, defaults to VERTEX_MODEL")
