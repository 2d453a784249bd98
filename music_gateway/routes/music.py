# ABOUTME: Music generation API routes
# ABOUTME: Implements POST and GET /api/generate-music returning Base64 audio as JSON
from typing import Optional
from fastapi import APIRouter, Depends

from music_gateway.dependencies import get_music_gateway
from music_gateway.core.gateway import MusicGateway
from music_gateway.models.requests import MusicGenerationRequest
from music_gateway.models.responses import MusicGenerationResponse

router = APIRouter()


@router.post("/generate-music", response_model=MusicGenerationResponse)
async def generate_music(
    music_request: MusicGenerationRequest,
    gateway: MusicGateway = Depends(get_music_gateway)
):
    """
    Generate roughly 15 seconds of music for a prompt.

    Errors are rendered by the exception handlers in main:
    400 for prompt problems, 429 while another generation runs, 500 when the model fails.
    """
    audio_base64 = await gateway.generate(music_request.prompt, music_request.model)
    return MusicGenerationResponse(audioData=audio_base64)


@router.get("/generate-music", response_model=MusicGenerationResponse)
async def generate_music_get(
    prompt: Optional[str] = None,
    model: Optional[str] = None,
    gateway: MusicGateway = Depends(get_music_gateway)
):
    """Convenience GET for quick browser tests: /api/generate-music?prompt=..."""
    audio_base64 = await gateway.generate(prompt, model)
    return MusicGenerationResponse(audioData=audio_base64)
