"""Shared pytest fixtures for flux image server tests."""

import pytest

from fluximageserver.config import ReplicateConfig
from fluximageserver.models.predictions import Prediction
from fluximageserver.services.image_service import ImageService

PNG_BYTES = b"\x89PNG\r\n\x1a\nmock_image_data"
IMAGE_URL = "https://replicate.delivery/xezq/output.png"


class MockImageProvider:
    """Mock image provider for testing."""

    def __init__(
        self,
        prediction: Prediction | None = None,
        image_bytes: bytes = PNG_BYTES,
        prediction_error: Exception | None = None,
        fetch_error: Exception | None = None,
    ):
        """
        Initialize mock provider.

        Args:
            prediction: Prediction to return (defaults to a succeeded one)
            image_bytes: Bytes returned by fetch_output
            prediction_error: If set, create_prediction raises it
            fetch_error: If set, fetch_output raises it
        """
        self.prediction = prediction or Prediction(id="p1", status="succeeded", output=IMAGE_URL)
        self.image_bytes = image_bytes
        self.prediction_error = prediction_error
        self.fetch_error = fetch_error
        self.requests = []
        self.fetched_urls = []

    async def create_prediction(self, request):
        """Mock create_prediction method."""
        self.requests.append(request)
        if self.prediction_error:
            raise self.prediction_error
        return self.prediction

    async def fetch_output(self, url):
        """Mock fetch_output method."""
        self.fetched_urls.append(url)
        if self.fetch_error:
            raise self.fetch_error
        return self.image_bytes


@pytest.fixture
def config():
    """Fixture for a test Replicate configuration."""
    return ReplicateConfig(api_token="test-token")


@pytest.fixture
def mock_image_provider():
    """Fixture for a working mock image provider."""
    return MockImageProvider()


@pytest.fixture
def image_service(mock_image_provider):
    """Fixture for an image service backed by the mock provider."""
    return ImageService(mock_image_provider, model_name="black-forest-labs/flux-schnell")
