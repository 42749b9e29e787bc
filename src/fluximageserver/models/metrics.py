"""Metrics models for the Flux image server."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GenerationMetrics(BaseModel):
    """Tracking data for a single generate_image invocation."""

    duration_ms: int = Field(..., ge=0, description="Total generation time in milliseconds")
    model_used: Optional[str] = Field(None, description="Replicate model identifier")
    image_bytes: Optional[int] = Field(None, ge=0, description="Size of the downloaded asset")
    timestamp: Optional[datetime] = Field(None, description="When the generation completed (UTC)")
    input: Optional[str] = Field(None, description="Input parameters as JSON string (for observability)")
