"""Replicate image generation provider."""

import logging
from typing import Any

import httpx

from fluximageserver.config import ReplicateConfig
from fluximageserver.models.errors import ErrorCode, ProviderError
from fluximageserver.models.predictions import Prediction
from fluximageserver.models.requests import GenerationRequest

logger = logging.getLogger(__name__)


class ReplicateProvider:
    """Image provider using the Replicate predictions API."""

    def __init__(self, config: ReplicateConfig):
        """
        Initialize Replicate provider.

        Args:
            config: Replicate settings (token, base URL, model, timeout)
        """
        self.config = config

    async def create_prediction(self, request: GenerationRequest) -> Prediction:
        """
        Run a prediction synchronously.

        The ``Prefer: wait`` header asks Replicate to hold the connection until
        the prediction finishes instead of returning a polling handle.

        Args:
            request: Validated generation request

        Returns:
            Parsed prediction response

        Raises:
            ProviderError: For HTTP status, transport and malformed-response failures
        """
        body = {"input": request.to_provider_input()}

        try:
            async with httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=self.config.auth_headers,
                timeout=self.config.timeout_seconds,
            ) as client:
                response = await client.post(
                    self.config.predictions_path,
                    json=body,
                    headers={"Prefer": "wait"},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise _classify_http_error(e) from e

        payload: Any = None
        try:
            payload = response.json()
            prediction = Prediction.model_validate(payload)
        except ValueError as e:
            # Non-JSON body, or JSON that does not match the prediction shape
            logger.warning(f"⚠️ [ReplicateProvider] Malformed prediction response: {e!r}")
            raise ProviderError(
                ErrorCode.PROVIDER_ERROR,
                f"Image generation failed: {_payload_detail(payload) or 'Unknown error'}",
                original_exception=e,
            ) from e

        logger.info(f"🛰️ [ReplicateProvider] Prediction {prediction.id or '<no id>'} finished with status {prediction.status}")
        return prediction

    async def fetch_output(self, url: str) -> bytes:
        """
        Download the generated asset. No auth headers are sent.

        Args:
            url: Asset URL from a successful prediction

        Returns:
            Raw image bytes

        Raises:
            ProviderError: For HTTP status and transport failures
        """
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise _classify_http_error(e) from e

        return response.content


def _classify_http_error(e: httpx.HTTPError) -> ProviderError:
    """Map an httpx failure to a ProviderError, preferring provider-supplied detail."""
    if isinstance(e, httpx.HTTPStatusError):
        status = e.response.status_code
        detail = _extract_error_detail(e.response)
        message = f"API error: {detail or _transport_message(e)}"

        if status in (401, 403):
            code = ErrorCode.AUTHENTICATION_REQUIRED
        elif status == 429:
            code = ErrorCode.RATE_LIMITED
        elif status >= 500:
            code = ErrorCode.PROVIDER_OVERLOADED
        else:
            code = ErrorCode.PROVIDER_ERROR

        logger.warning(f"⚠️ [ReplicateProvider] HTTP {status} from {e.request.url}: {detail or 'no detail'}")
        return ProviderError(code, message, original_exception=e)

    if isinstance(e, httpx.TimeoutException):
        code = ErrorCode.PROVIDER_TIMEOUT
    else:
        code = ErrorCode.NETWORK_ERROR

    logger.warning(f"⚠️ [ReplicateProvider] Transport failure: {e!r}")
    return ProviderError(code, f"API error: {_transport_message(e)}", original_exception=e)


def _extract_error_detail(response: httpx.Response) -> str | None:
    """Pull the diagnostic text out of an error payload, if there is one."""
    try:
        payload: Any = response.json()
    except ValueError:
        return None
    return _payload_detail(payload)


def _payload_detail(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None

    # Prediction errors use "error"; API errors use RFC 7807 "detail"
    detail = payload.get("error") or payload.get("detail")
    if not detail:
        return None
    return detail if isinstance(detail, str) else str(detail)


def _transport_message(e: Exception) -> str:
    return str(e) or e.__class__.__name__
