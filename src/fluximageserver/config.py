"""Process-wide configuration for the Flux image server."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from fluximageserver.models.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.replicate.com/v1"
DEFAULT_MODEL = "black-forest-labs/flux-schnell"


class ReplicateConfig(BaseModel):
    """Immutable Replicate settings, built once at startup and passed to the provider."""

    model_config = ConfigDict(frozen=True)

    api_token: str = Field(..., min_length=1, description="Replicate API token (bearer credential)")
    base_url: str = Field(DEFAULT_BASE_URL, description="Replicate API base URL")
    model: str = Field(DEFAULT_MODEL, description="Replicate model in owner/name form")
    timeout_seconds: Optional[float] = Field(
        None,
        gt=0,
        description="Client-side timeout per HTTP call. None disables it, since Prefer: wait can block for long.",
    )

    @property
    def predictions_path(self) -> str:
        return f"/models/{self.model}/predictions"

    @property
    def auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ReplicateConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            ReplicateConfig instance

        Raises:
            ConfigurationError: If REPLICATE_API_TOKEN is missing or a value is malformed
        """
        env = os.environ if environ is None else environ

        api_token = (env.get("REPLICATE_API_TOKEN") or "").strip()
        if not api_token:
            raise ConfigurationError("REPLICATE_API_TOKEN environment variable is required")

        timeout_seconds = None
        raw_timeout = env.get("REPLICATE_TIMEOUT")
        if raw_timeout:
            try:
                timeout_seconds = float(raw_timeout)
            except ValueError as e:
                raise ConfigurationError(f"REPLICATE_TIMEOUT must be a number of seconds, got {raw_timeout!r}") from e
            if timeout_seconds <= 0:
                raise ConfigurationError(f"REPLICATE_TIMEOUT must be positive, got {raw_timeout!r}")

        return cls(
            api_token=api_token,
            base_url=env.get("REPLICATE_API_BASE_URL") or DEFAULT_BASE_URL,
            model=env.get("REPLICATE_MODEL") or DEFAULT_MODEL,
            timeout_seconds=timeout_seconds,
        )
