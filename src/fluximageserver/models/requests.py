"""Request models for the Flux image server."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SIZE = 768
MIN_SIZE = 256
MAX_SIZE = 1024


class GenerationRequest(BaseModel):
    """Validated arguments for the ``generate_image`` tool.

    Bounded fields are range-checked, never clamped: a value outside its range
    fails validation so the caller can correct it and call again.
    """

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    prompt: str = Field(..., min_length=1, description="Text prompt describing the image to generate")
    negative_prompt: Optional[str] = Field(None, description="Text prompt describing what to avoid in the image")
    width: int = Field(DEFAULT_SIZE, ge=MIN_SIZE, le=MAX_SIZE, description="Width of the output image")
    height: int = Field(DEFAULT_SIZE, ge=MIN_SIZE, le=MAX_SIZE, description="Height of the output image")
    num_inference_steps: int = Field(30, ge=1, le=100, description="Number of denoising steps")
    guidance_scale: float = Field(7.5, ge=1, le=20, description="Scale for classifier-free guidance")
    seed: Optional[int] = Field(None, description="Random seed for reproducibility")

    @field_validator("width", "height", "num_inference_steps", "seed", mode="before")
    @classmethod
    def accept_whole_floats(cls, value: Any) -> Any:
        """JSON numbers like 512.0 are integers; fractional values stay invalid."""
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    def to_provider_input(self) -> dict[str, Any]:
        """Build the prediction ``input`` object, leaving out unset optional fields."""
        return self.model_dump(exclude_none=True)
