# ABOUTME: Pytest configuration and shared fixtures
# ABOUTME: Provides a fake clock, a mock Vertex model client, and singleton resets for gateway tests
import os
from unittest.mock import AsyncMock, Mock

import pytest

from music_gateway.config import Settings
from music_gateway.core.gateway import MusicGateway

GATEWAY_ENV_VARS = [
    "VERTEX_MODEL",
    "VERTEX_PROJECT",
    "VERTEX_LOCATION",
    "GOOGLE_CLOUD_PROJECT",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "PORT",
    "MAX_ATTEMPTS",
    "BASE_DELAY_MS",
    "MIN_INTERVAL_MS",
    "HARD_COOLDOWN_MS",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
    "LOG_JSON",
]


class FakeClock:
    """Millisecond clock whose sleep advances time instead of waiting."""

    def __init__(self, start_ms: float = 1_000_000.0):
        self.now = start_ms
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds * 1000


def audio_response(data="QUFBQQ==", key="inlineData"):
    """Build a minimal upstream response carrying one audio part."""
    return {"candidates": [{"content": {"parts": [{key: {"data": data, "mimeType": "audio/wav"}}]}}]}


@pytest.fixture
def build_response():
    return audio_response


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Clear gateway environment variables and reset singletons around each test."""
    for var in GATEWAY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    Settings._reset_instance()
    MusicGateway._reset_instance()
    yield
    Settings._reset_instance()
    MusicGateway._reset_instance()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_model():
    model = Mock()
    model.generate_content = AsyncMock(return_value=audio_response())
    return model


@pytest.fixture
def mock_client(mock_model):
    client = Mock()
    client.get_model.return_value = mock_model
    return client


@pytest.fixture
def make_gateway(mock_client, clock):
    """Factory for gateways wired to the fake clock and mock client."""
    def _make(**kwargs):
        options = dict(
            default_model="lyria-002",
            max_attempts=1,
            base_delay_ms=1200,
            min_interval_ms=2000,
            hard_cooldown_ms=15000,
            clock=clock,
            sleep=clock.sleep,
            rand=lambda: 0.5,
            metrics=Mock(),
        )
        options.update(kwargs)
        return MusicGateway(mock_client, **options)
    return _make
