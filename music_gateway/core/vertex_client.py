# ABOUTME: This file adapts the google-genai SDK (Vertex AI backend) to the gateway's model client protocol.
# ABOUTME: Responses are returned as camelCase mappings with inline bytes already Base64 encoded.

from __future__ import annotations
import logging
import threading
from typing import Any, Dict, Mapping, Optional, Protocol

from google import genai

logger = logging.getLogger(__name__)


class MusicModel(Protocol):
    """A single upstream model bound to a name."""

    async def generate_content(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        """Send a structured prompt payload and return the raw response."""
        ...


class MusicModelClient(Protocol):
    """Factory for models within one project and region."""

    def get_model(self, model_name: str) -> MusicModel:
        ...


def response_to_dict(response: Any) -> Dict[str, Any]:
    """Convert an SDK response into a plain JSON-style mapping.

    google-genai models serialize with camelCase aliases and encode bytes
    fields as Base64 in JSON mode, which is the shape the gateway scans.
    """
    if isinstance(response, Mapping):
        return dict(response)
    if hasattr(response, "model_dump"):
        return response.model_dump(mode="json", by_alias=True, exclude_none=True)
    raise TypeError(f"Unsupported response type: {type(response).__name__}")


class VertexMusicModel:
    """Model handle that forwards payloads to the async google-genai API."""

    def __init__(self, client: "VertexMusicClient", model_name: str):
        self._client = client
        self.model_name = model_name

    async def generate_content(self, request: Mapping[str, Any]) -> Dict[str, Any]:
        sdk = self._client.sdk_client()
        response = await sdk.aio.models.generate_content(
            model=self.model_name,
            contents=request["contents"],
        )
        return response_to_dict(response)


class VertexMusicClient:
    """Vertex AI client for generative music models.

    The underlying SDK client is created on first use so the service can start
    (and report its configuration on /_debug) before credentials are in place.
    Authentication comes from Application Default Credentials.
    """

    def __init__(self, project: Optional[str], location: str):
        self.project = project
        self.location = location
        self._sdk_client: Optional[genai.Client] = None
        self._lock = threading.Lock()

    def sdk_client(self) -> genai.Client:
        if self._sdk_client is None:
            with self._lock:
                if self._sdk_client is None:
                    logger.info(
                        f"Creating Vertex AI client for project={self.project} location={self.location}"
                    )
                    self._sdk_client = genai.Client(
                        vertexai=True,
                        project=self.project,
                        location=self.location,
                    )
        return self._sdk_client

    def get_model(self, model_name: str) -> VertexMusicModel:
        return VertexMusicModel(self, model_name)
