"""
Azure Computer Vision Provider

REST client for the Computer Vision ``analyze`` and ``models`` endpoints.

    POST {endpoint}/vision/{version}/analyze?visualFeatures=Objects,Tags
        Ocp-Apim-Subscription-Key: <key>
        Content-Type: application/octet-stream
        <raw image bytes>

    GET  {endpoint}/vision/{version}/models      (health check)

Failures are translated into the gateway's request errors so the
RetryExecutor can classify them from their tag:

    httpx.TimeoutException / TransportError  -> TransientRequestError
    HTTP 408, 429, 5xx                        -> TransientRequestError
    any other HTTP error, bad payload         -> PermanentRequestError
"""

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from vision_gateway.core.config.constants import (
    HEADER_SUBSCRIPTION_KEY,
    TRANSIENT_HTTP_STATUS_CODES,
    VisualFeature,
)
from vision_gateway.core.exceptions import PermanentRequestError, TransientRequestError
from vision_gateway.core.logging.logger import get_logger
from vision_gateway.vision.models.detection import DetectionResult, ImageAnalysis
from vision_gateway.vision.providers.base_provider import BaseVisionProvider, ProviderConfig

logger = get_logger(__name__)


class AzureVisionProvider(BaseVisionProvider):
    """
    Azure Computer Vision provider.

    Args:
        config: Provider configuration
        client: Optional pre-built httpx.AsyncClient (tests pass one with a MockTransport)
    """

    def __init__(self, config: ProviderConfig, client: httpx.AsyncClient | None = None):
        super().__init__(config)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            headers={HEADER_SUBSCRIPTION_KEY: config.api_key},
        )
        self._client.headers.setdefault(HEADER_SUBSCRIPTION_KEY, config.api_key)
        self._base_url = f"{config.endpoint}/vision/{config.api_version}"

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self._base_url}/{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransientRequestError.from_exception(e, message="Vision request timed out", url=url)
        except httpx.TransportError as e:
            raise TransientRequestError.from_exception(e, message="Vision service unreachable", url=url)

        if response.is_success:
            return response

        details = {"url": url, "status_code": response.status_code, "body": response.text[:500]}
        if response.status_code in TRANSIENT_HTTP_STATUS_CODES:
            error = TransientRequestError(f"Vision service returned {response.status_code}", details=details)
            retry_after = response.headers.get("Retry-After")
            if retry_after:
                error.with_context(retry_after=retry_after)
            raise error
        raise PermanentRequestError(f"Vision service returned {response.status_code}", details=details)

    async def _analyze_internal(
        self,
        image_bytes: bytes,
        features: list[VisualFeature],
    ) -> DetectionResult:
        response = await self._send(
            "POST",
            "analyze",
            params={"visualFeatures": ",".join(feature.value for feature in features)},
            content=image_bytes,
            headers={"Content-Type": "application/octet-stream"},
        )

        try:
            analysis = ImageAnalysis.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise PermanentRequestError.from_exception(e, message="Malformed analyze response")

        logger.debug("Analyze response parsed", request_id=analysis.request_id)
        return DetectionResult.from_analysis(analysis)

    async def health_check(self) -> dict[str, Any]:
        """List available domain models; any 2xx means the service is reachable."""
        response = await self._send("GET", "models")
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        models = payload.get("models", []) if isinstance(payload, dict) else []
        return {
            "status": "healthy",
            "provider": self.name,
            "models": [m.get("name") for m in models if isinstance(m, dict)],
        }

    async def close(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()
