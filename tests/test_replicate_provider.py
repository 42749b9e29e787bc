"""Tests for the Replicate image provider."""

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from fluximageserver.models.errors import ErrorCode, ProviderError
from fluximageserver.models.requests import GenerationRequest
from fluximageserver.providers.base import ImageProvider
from fluximageserver.providers.replicate_provider import ReplicateProvider

PREDICTIONS_URL = "https://api.replicate.com/v1/models/black-forest-labs/flux-schnell/predictions"
IMAGE_URL = "https://replicate.delivery/xezq/output.png"


def _response(status_code, method="POST", url=PREDICTIONS_URL, **kwargs):
    return httpx.Response(status_code, request=httpx.Request(method, url), **kwargs)


def test_replicate_provider_satisfies_protocol(config):
    """Test that ReplicateProvider implements the ImageProvider protocol."""
    assert isinstance(ReplicateProvider(config), ImageProvider)


@pytest.mark.asyncio
async def test_create_prediction_success(config):
    """Test that a prediction is posted with auth, Prefer: wait and the input body."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_post = AsyncMock(
            return_value=_response(201, json={"id": "abc", "status": "succeeded", "output": [IMAGE_URL]})
        )
        mock_httpx.return_value.__aenter__.return_value.post = mock_post

        provider = ReplicateProvider(config)
        prediction = await provider.create_prediction(GenerationRequest(prompt="A red dragon", seed=3))

        assert prediction.id == "abc"
        assert prediction.succeeded
        assert prediction.output_url() == IMAGE_URL

        client_kwargs = mock_httpx.call_args.kwargs
        assert client_kwargs["base_url"] == "https://api.replicate.com/v1"
        assert client_kwargs["headers"]["Authorization"] == "Bearer test-token"
        assert client_kwargs["headers"]["Content-Type"] == "application/json"

        mock_post.assert_awaited_once()
        path = mock_post.call_args.args[0]
        assert path == "/models/black-forest-labs/flux-schnell/predictions"
        assert mock_post.call_args.kwargs["headers"] == {"Prefer": "wait"}
        assert mock_post.call_args.kwargs["json"] == {
            "input": {
                "prompt": "A red dragon",
                "width": 768,
                "height": 768,
                "num_inference_steps": 30,
                "guidance_scale": 7.5,
                "seed": 3,
            }
        }


@pytest.mark.asyncio
async def test_create_prediction_http_error_uses_provider_detail(config):
    """Test that an error payload's detail becomes the error message."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_httpx.return_value.__aenter__.return_value.post = AsyncMock(
            return_value=_response(422, json={"title": "Invalid input", "detail": "input.width: must be a multiple of 16"})
        )

        provider = ReplicateProvider(config)
        with pytest.raises(ProviderError) as exc_info:
            await provider.create_prediction(GenerationRequest(prompt="test"))

        assert exc_info.value.error_code == ErrorCode.PROVIDER_ERROR
        assert exc_info.value.message == "API error: input.width: must be a multiple of 16"
        assert isinstance(exc_info.value.original_exception, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_create_prediction_http_error_prefers_error_field(config):
    """Test that the 'error' field wins over 'detail'."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_httpx.return_value.__aenter__.return_value.post = AsyncMock(
            return_value=_response(400, json={"error": "NSFW content detected", "detail": "other"})
        )

        provider = ReplicateProvider(config)
        with pytest.raises(ProviderError) as exc_info:
            await provider.create_prediction(GenerationRequest(prompt="test"))

        assert exc_info.value.message == "API error: NSFW content detected"


@pytest.mark.asyncio
async def test_create_prediction_http_error_without_payload(config):
    """Test that a status error with no JSON body falls back to the transport message."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_httpx.return_value.__aenter__.return_value.post = AsyncMock(
            return_value=_response(502, text="<html>Bad Gateway</html>")
        )

        provider = ReplicateProvider(config)
        with pytest.raises(ProviderError) as exc_info:
            await provider.create_prediction(GenerationRequest(prompt="test"))

        assert exc_info.value.error_code == ErrorCode.PROVIDER_OVERLOADED
        assert exc_info.value.message.startswith("API error: ")
        assert "502" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code,expected_code",
    [
        (401, ErrorCode.AUTHENTICATION_REQUIRED),
        (403, ErrorCode.AUTHENTICATION_REQUIRED),
        (429, ErrorCode.RATE_LIMITED),
        (500, ErrorCode.PROVIDER_OVERLOADED),
        (404, ErrorCode.PROVIDER_ERROR),
    ],
)
async def test_create_prediction_status_classification(config, status_code, expected_code):
    """Test that HTTP status codes map to error codes."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_httpx.return_value.__aenter__.return_value.post = AsyncMock(
            return_value=_response(status_code, json={"detail": "nope"})
        )

        provider = ReplicateProvider(config)
        with pytest.raises(ProviderError) as exc_info:
            await provider.create_prediction(GenerationRequest(prompt="test"))

        assert exc_info.value.error_code == expected_code


@pytest.mark.asyncio
async def test_create_prediction_transport_failure(config):
    """Test that a connection failure carries the raw transport message."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_httpx.return_value.__aenter__.return_value.post = AsyncMock(
            side_effect=httpx.ConnectError("Connection refused")
        )

        provider = ReplicateProvider(config)
        with pytest.raises(ProviderError) as exc_info:
            await provider.create_prediction(GenerationRequest(prompt="test"))

        assert exc_info.value.error_code == ErrorCode.NETWORK_ERROR
        assert exc_info.value.message == "API error: Connection refused"


@pytest.mark.asyncio
async def test_create_prediction_timeout(config):
    """Test that a timeout is classified as PROVIDER_TIMEOUT."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_httpx.return_value.__aenter__.return_value.post = AsyncMock(
            side_effect=httpx.ReadTimeout("timed out")
        )

        provider = ReplicateProvider(config)
        with pytest.raises(ProviderError) as exc_info:
            await provider.create_prediction(GenerationRequest(prompt="test"))

        assert exc_info.value.error_code == ErrorCode.PROVIDER_TIMEOUT
        assert "timed out" in exc_info.value.message


@pytest.mark.asyncio
async def test_fetch_output_success(config):
    """Test that the asset is downloaded without auth headers."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_get = AsyncMock(return_value=_response(200, method="GET", url=IMAGE_URL, content=b"image_data"))
        mock_httpx.return_value.__aenter__.return_value.get = mock_get

        provider = ReplicateProvider(config)
        result = await provider.fetch_output(IMAGE_URL)

        assert result == b"image_data"
        mock_get.assert_awaited_once_with(IMAGE_URL)
        assert "headers" not in mock_httpx.call_args.kwargs


@pytest.mark.asyncio
async def test_fetch_output_not_found(config):
    """Test that a failed download raises ProviderError."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_httpx.return_value.__aenter__.return_value.get = AsyncMock(
            return_value=_response(404, method="GET", url=IMAGE_URL, text="missing")
        )

        provider = ReplicateProvider(config)
        with pytest.raises(ProviderError) as exc_info:
            await provider.fetch_output(IMAGE_URL)

        assert exc_info.value.error_code == ErrorCode.PROVIDER_ERROR
        assert "404" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response_kwargs,expected_message",
    [
        ({"text": "<html>upstream hiccup</html>"}, "Image generation failed: Unknown error"),
        ({"json": {"id": "abc", "output": None}}, "Image generation failed: Unknown error"),
        ({"json": {"error": "model crashed"}}, "Image generation failed: model crashed"),
        ({"json": {"status": "failed", "error": {"code": "E42"}}}, "Image generation failed: {'code': 'E42'}"),
        ({"json": ["not", "an", "object"]}, "Image generation failed: Unknown error"),
    ],
)
async def test_create_prediction_malformed_success_body(config, response_kwargs, expected_message):
    """Test that an unparseable 2xx body becomes a clean ProviderError."""
    with patch("fluximageserver.providers.replicate_provider.httpx.AsyncClient") as mock_httpx:
        mock_httpx.return_value.__aenter__.return_value.post = AsyncMock(
            return_value=_response(201, **response_kwargs)
        )

        provider = ReplicateProvider(config)
        with pytest.raises(ProviderError) as exc_info:
            await provider.create_prediction(GenerationRequest(prompt="test"))

        assert exc_info.value.error_code == ErrorCode.PROVIDER_ERROR
        assert exc_info.value.message == expected_message
        assert "pydantic" not in exc_info.value.message
        assert "Expecting value" not in exc_info.value.message
