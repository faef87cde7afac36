import asyncio
from collections.abc import Callable
from typing import Any

from vision_gateway.core.config.constants import VisualFeature
from vision_gateway.core.exceptions import TransientRequestError
from vision_gateway.core.logging import get_logger
from vision_gateway.vision.models.detection import DetectionResult
from vision_gateway.vision.providers.base_provider import BaseVisionProvider, ProviderConfig

logger = get_logger(__name__)


def _default_config() -> ProviderConfig:
    return ProviderConfig(name="fake", api_key="fake-key", endpoint="http://fake-vision.local")


class FakeVisionProvider(BaseVisionProvider):
    """
    An offline provider for tests and demos.
    Returns a canned result (or one computed from the image bytes) after an
    optional latency, and can be told to fail the next N calls.
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        result: DetectionResult | Callable[[bytes], DetectionResult] | None = None,
        latency: float = 0.0,
    ):
        super().__init__(config or _default_config())
        self._result = result or DetectionResult.of(("object", 0.5, (0, 0, 0)))
        self.latency = latency
        self.healthy = True
        self.closed = False
        self.analyzed: list[bytes] = []
        self._failures_to_inject: list[Exception] = []

    def fail_next(self, *errors: Exception) -> None:
        """Queue errors raised by the next calls to analyze, in order."""
        self._failures_to_inject.extend(errors)

    async def _analyze_internal(self, image_bytes: bytes, features: list[VisualFeature]) -> DetectionResult:
        if self.latency:
            await asyncio.sleep(self.latency)
        self.analyzed.append(image_bytes)
        if self._failures_to_inject:
            raise self._failures_to_inject.pop(0)
        if callable(self._result):
            return self._result(image_bytes)
        return self._result

    async def health_check(self) -> dict[str, Any]:
        if not self.healthy:
            raise TransientRequestError("Fake provider marked unhealthy")
        return {"status": "healthy", "provider": self.name, "models": []}

    async def close(self) -> None:
        self.closed = True
