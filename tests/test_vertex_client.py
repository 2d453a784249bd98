# ABOUTME: Tests for the google-genai backed Vertex model client adapter.
# ABOUTME: The SDK client is mocked; response conversion is checked against real SDK types.

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import types

from music_gateway.core.gateway import build_request_payload, extract_audio
from music_gateway.core.vertex_client import VertexMusicClient, response_to_dict


class TestResponseConversion:

    def test_sdk_response_becomes_camel_case_base64(self):
        response = types.GenerateContentResponse(
            candidates=[
                types.Candidate(
                    content=types.Content(
                        role="model",
                        parts=[types.Part(inline_data=types.Blob(data=b"abc", mime_type="audio/wav"))],
                    )
                )
            ]
        )

        converted = response_to_dict(response)

        part = converted["candidates"][0]["content"]["parts"][0]
        assert part["inlineData"]["mimeType"] == "audio/wav"
        assert base64.b64decode(part["inlineData"]["data"]) == b"abc"
        assert extract_audio(converted) == part["inlineData"]["data"]

    def test_mapping_passes_through(self):
        payload = {"candidates": []}
        assert response_to_dict(payload) == payload

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            response_to_dict(object())


class TestVertexMusicClient:

    @patch("music_gateway.core.vertex_client.genai.Client")
    def test_sdk_client_is_created_lazily(self, mock_sdk_client):
        client = VertexMusicClient(project="demo", location="us-central1")
        client.get_model("lyria-002")

        mock_sdk_client.assert_not_called()

        client.sdk_client()
        client.sdk_client()
        mock_sdk_client.assert_called_once_with(vertexai=True, project="demo", location="us-central1")

    @pytest.mark.asyncio
    @patch("music_gateway.core.vertex_client.genai.Client")
    async def test_generate_content_forwards_contents(self, mock_sdk_client):
        sdk_response = MagicMock()
        sdk_response.model_dump.return_value = {"candidates": [{"content": {"parts": [{"inlineData": {"data": "Wg=="}}]}}]}
        sdk = mock_sdk_client.return_value
        sdk.aio.models.generate_content = AsyncMock(return_value=sdk_response)

        model = VertexMusicClient(project="demo", location="us-central1").get_model("lyria-002")
        request = build_request_payload("sea shanty")
        result = await model.generate_content(request)

        sdk.aio.models.generate_content.assert_awaited_once_with(
            model="lyria-002", contents=request["contents"]
        )
        sdk_response.model_dump.assert_called_once_with(mode="json", by_alias=True, exclude_none=True)
        assert extract_audio(result) == "Wg=="

    @pytest.mark.asyncio
    @patch("music_gateway.core.vertex_client.genai.Client")
    async def test_sdk_errors_propagate(self, mock_sdk_client):
        sdk = mock_sdk_client.return_value
        sdk.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("429 RESOURCE_EXHAUSTED"))

        model = VertexMusicClient(project="demo", location="us-central1").get_model("lyria-002")

        with pytest.raises(RuntimeError, match="RESOURCE_EXHAUSTED"):
            await model.generate_content(build_request_payload("x"))
