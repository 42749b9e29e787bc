"""Models package for the Flux image server."""

from fluximageserver.models.errors import ConfigurationError, ErrorCode, ProviderError, is_retryable
from fluximageserver.models.image_responses import GeneratedImage, ImageGenerationResponse
from fluximageserver.models.metrics import GenerationMetrics
from fluximageserver.models.predictions import Prediction, PredictionStatus
from fluximageserver.models.requests import GenerationRequest
from fluximageserver.models.responses import GenerationError

__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "ProviderError",
    "is_retryable",
    "GeneratedImage",
    "GenerationError",
    "GenerationMetrics",
    "GenerationRequest",
    "ImageGenerationResponse",
    "Prediction",
    "PredictionStatus",
]
