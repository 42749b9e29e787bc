"""Image generation service that runs a prediction and fetches its output."""

import base64
import json
import logging
import time
from datetime import datetime, timezone

from fluximageserver.models.errors import ErrorCode, ProviderError
from fluximageserver.models.image_responses import PNG_MIME_TYPE, GeneratedImage, ImageGenerationResponse
from fluximageserver.models.metrics import GenerationMetrics
from fluximageserver.models.requests import GenerationRequest
from fluximageserver.models.responses import GenerationError
from fluximageserver.providers.base import ImageProvider

logger = logging.getLogger(__name__)

NO_OUTPUT_MESSAGE = "No image was generated or invalid response format"
FALLBACK_MESSAGE = "Failed to generate image"


class ImageService:
    """Turns a validated request into a generated image or a classified error."""

    def __init__(self, provider: ImageProvider, model_name: str | None = None):
        """
        Initialize image service.

        Args:
            provider: Provider used for predictions and asset downloads
            model_name: Model identifier recorded in metrics
        """
        self.provider = provider
        self.model_name = model_name

    async def generate(self, request: GenerationRequest) -> ImageGenerationResponse:
        """
        Generate one image and return it base64-encoded.

        The asset is only fetched after the provider reports a successful
        prediction. Failures never raise; they come back as an error response.

        Args:
            request: Validated generation request

        Returns:
            ImageGenerationResponse with the image or error
        """
        start_time = time.time()
        input_json = json.dumps(request.to_provider_input())

        logger.info(f'🎨 [ImageService] Generating image with prompt: "{request.prompt}"')

        try:
            prediction = await self.provider.create_prediction(request)

            if not prediction.succeeded:
                reason = prediction.error or "Unknown error"
                return self._failure(
                    ErrorCode.PROVIDER_REJECTED,
                    f"Image generation failed: {reason}",
                    start_time,
                    input_json,
                    details={"status": prediction.status, "prediction_id": prediction.id},
                )

            image_url = prediction.output_url()
            if image_url is None:
                return self._failure(
                    ErrorCode.NO_OUTPUT,
                    NO_OUTPUT_MESSAGE,
                    start_time,
                    input_json,
                    details={"prediction_id": prediction.id},
                )

            image_bytes = await self.provider.fetch_output(image_url)
            if not image_bytes:
                return self._failure(
                    ErrorCode.NO_OUTPUT,
                    f"Downloaded image was empty: {image_url}",
                    start_time,
                    input_json,
                    details={"prediction_id": prediction.id},
                )

        except ProviderError as e:
            return self._failure(e.error_code, e.message, start_time, input_json)
        except Exception as e:
            logger.exception("❌ [ImageService] Unexpected error during generation")
            return self._failure(ErrorCode.INTERNAL_ERROR, str(e) or FALLBACK_MESSAGE, start_time, input_json)

        metrics = GenerationMetrics(
            duration_ms=_elapsed_ms(start_time),
            model_used=self.model_name,
            image_bytes=len(image_bytes),
            timestamp=datetime.now(timezone.utc),
            input=input_json,
        )
        logger.info(f"✅ [ImageService] Image ready: {metrics.image_bytes} bytes in {metrics.duration_ms}ms")

        return ImageGenerationResponse(
            success=True,
            image=GeneratedImage(
                data=base64.b64encode(image_bytes).decode("ascii"),
                mime_type=PNG_MIME_TYPE,
                source_url=image_url,
            ),
            metrics=metrics,
        )

    def _failure(
        self,
        code: ErrorCode,
        message: str,
        start_time: float,
        input_json: str,
        details: dict | None = None,
    ) -> ImageGenerationResponse:
        logger.error(f"❌ [ImageService] {code.value}: {message}")
        return ImageGenerationResponse(
            success=False,
            error=GenerationError.from_code(code, message, details=details),
            metrics=GenerationMetrics(
                duration_ms=_elapsed_ms(start_time),
                model_used=self.model_name,
                timestamp=datetime.now(timezone.utc),
                input=input_json,
            ),
        )


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)
