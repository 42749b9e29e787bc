"""Replicate prediction response models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class PredictionStatus(str, Enum):
    """Prediction lifecycle states reported by Replicate."""

    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


class Prediction(BaseModel):
    """Synchronous prediction response (``Prefer: wait``)."""

    id: Optional[str] = Field(None, description="Prediction identifier")
    status: str = Field(..., description="Prediction status, see PredictionStatus")
    output: Any = Field(None, description="Model output, normally the generated asset URL")
    error: Optional[str] = Field(None, description="Provider diagnostic when the prediction failed")

    @property
    def succeeded(self) -> bool:
        return self.status == PredictionStatus.SUCCEEDED.value

    def output_url(self) -> str | None:
        """
        Return the URL of the generated asset, if the output carries one.

        Flux models may answer with a bare URL or with a list of URLs; only
        the first image is used.
        """
        output = self.output
        if isinstance(output, list):
            output = output[0] if output else None
        if isinstance(output, str) and output:
            return output
        return None
