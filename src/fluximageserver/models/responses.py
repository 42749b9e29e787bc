"""Response models for the Flux image server."""

from typing import Optional

from pydantic import BaseModel, Field

from fluximageserver.models.errors import ErrorCode, is_retryable


class GenerationError(BaseModel):
    """Error details for failed generation operations."""

    code: ErrorCode = Field(..., description="Error category code")
    message: str = Field(..., description="User-friendly error message")
    retryable: bool = Field(..., description="Whether the client may retry this request")
    details: Optional[dict] = Field(None, description="Optional additional context for debugging")

    @classmethod
    def from_code(cls, code: ErrorCode, message: str, details: dict | None = None) -> "GenerationError":
        """Build an error whose retryable flag follows the error code."""
        return cls(code=code, message=message, retryable=is_retryable(code), details=details)
