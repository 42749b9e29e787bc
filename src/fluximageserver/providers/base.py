"""Base provider interface for image generation."""

from typing import Protocol

from typing_extensions import runtime_checkable

from fluximageserver.models.predictions import Prediction
from fluximageserver.models.requests import GenerationRequest


@runtime_checkable
class ImageProvider(Protocol):
    """Protocol for image generation providers."""

    async def create_prediction(self, request: GenerationRequest) -> Prediction:
        """
        Submit a generation request and wait for its result.

        Args:
            request: Validated generation request

        Returns:
            The completed (or failed) prediction

        Raises:
            ProviderError: If the API call itself fails
        """
        ...

    async def fetch_output(self, url: str) -> bytes:
        """
        Download a generated asset.

        Args:
            url: Asset URL taken from a successful prediction

        Returns:
            Raw image bytes

        Raises:
            ProviderError: If the download fails
        """
        ...
