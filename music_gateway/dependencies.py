# ABOUTME: Dependency injection functions for FastAPI
# ABOUTME: Provides get_music_gateway for injecting the process-wide MusicGateway
from music_gateway.core.gateway import MusicGateway

def get_music_gateway() -> MusicGateway:
    """Dependency injection function for MusicGateway"""
    return MusicGateway.instance()
