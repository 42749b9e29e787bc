"""Image generation response models."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from fluximageserver.models.metrics import GenerationMetrics
from fluximageserver.models.responses import GenerationError

PNG_MIME_TYPE = "image/png"


class GeneratedImage(BaseModel):
    """A generated image, ready for inline delivery."""

    data: str = Field(..., min_length=1, description="Base64-encoded image bytes")
    mime_type: str = Field(PNG_MIME_TYPE, description="Declared MIME type of the image")
    source_url: Optional[str] = Field(None, description="Provider URL the image was fetched from")


class ImageGenerationResponse(BaseModel):
    """Response model for image generation."""

    success: bool = Field(..., description="Whether generation succeeded")
    image: Optional[GeneratedImage] = Field(None, description="Generated image (present if success=True)")
    metrics: Optional[GenerationMetrics] = Field(None, description="Performance tracking")
    error: Optional[GenerationError] = Field(None, description="Error details if success=False")

    @model_validator(mode="after")
    def validate_success_state(self):
        """Ensure success state is consistent."""
        if self.success is True:
            if not self.image:
                raise ValueError("image must be present when success=True")
            if self.error:
                raise ValueError("error must be None when success=True")
        else:
            if not self.error:
                raise ValueError("error must be present when success=False")
            if self.image:
                raise ValueError("image must be None when success=False")
        return self
