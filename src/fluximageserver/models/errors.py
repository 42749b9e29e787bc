"""Error code definitions for the Flux image server."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error category codes for generation operations."""

    # Retryable errors (retryable=True)
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"
    PROVIDER_OVERLOADED = "PROVIDER_OVERLOADED"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"

    # Not retryable errors (retryable=False)
    INVALID_INPUT = "INVALID_INPUT"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    PROVIDER_REJECTED = "PROVIDER_REJECTED"
    NO_OUTPUT = "NO_OUTPUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Set of retryable error codes
RETRYABLE_ERRORS = {
    ErrorCode.PROVIDER_TIMEOUT,
    ErrorCode.PROVIDER_OVERLOADED,
    ErrorCode.RATE_LIMITED,
    ErrorCode.NETWORK_ERROR,
}


def is_retryable(code: ErrorCode) -> bool:
    """Check if an error code indicates a retryable error."""
    return code in RETRYABLE_ERRORS


class ProviderError(Exception):
    """Raised by providers when a call to the image API fails."""

    def __init__(self, error_code: ErrorCode, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.original_exception = original_exception


class ConfigurationError(Exception):
    """Raised at startup when required configuration is missing or malformed."""
