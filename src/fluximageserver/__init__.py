"""Flux image server - Replicate Flux Schnell image generation as an MCP tool."""

__version__ = "1.0.0"

from fluximageserver.config import ReplicateConfig
from fluximageserver.models.errors import ConfigurationError, ErrorCode, ProviderError, is_retryable
from fluximageserver.models.image_responses import GeneratedImage, ImageGenerationResponse
from fluximageserver.models.metrics import GenerationMetrics
from fluximageserver.models.predictions import Prediction, PredictionStatus
from fluximageserver.models.requests import GenerationRequest
from fluximageserver.models.responses import GenerationError
from fluximageserver.providers.base import ImageProvider
from fluximageserver.providers.replicate_provider import ReplicateProvider
from fluximageserver.server import TOOL_NAME, FluxImageServer
from fluximageserver.services.image_service import ImageService
from fluximageserver.utils.schema_utils import tool_input_schema

__all__ = [
    # Configuration
    "ReplicateConfig",
    # Response/Error types
    "ConfigurationError",
    "ErrorCode",
    "GenerationError",
    "GenerationMetrics",
    "GeneratedImage",
    "ImageGenerationResponse",
    "ProviderError",
    "is_retryable",
    # Request/provider types
    "GenerationRequest",
    "Prediction",
    "PredictionStatus",
    # Providers
    "ImageProvider",
    "ReplicateProvider",
    # Services
    "ImageService",
    # Server
    "FluxImageServer",
    "TOOL_NAME",
    # Utilities
    "tool_input_schema",
]
