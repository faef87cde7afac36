#!/usr/bin/env python3
"""
Base Vision Provider Abstract Class

This module defines the abstract base class for remote image-analysis
providers. Concrete implementations (Azure Computer Vision, the fake
provider) inherit from this class.

Architectural Decision: Abstract base class for consistent patterns
- Common interface for all providers (analyze / health_check / close)
- Structured logging around every billed call
- Retry is NOT done here: the gateway wraps ``analyze`` in its RetryExecutor
  so that quota and cache accounting see exactly one logical call

Author: Senior Solution Architect
Date: 2026-10-02
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from vision_gateway.core.config.constants import AZURE_VISION_API_VERSION, Stage, VisualFeature
from vision_gateway.core.exceptions import ConfigurationError
from vision_gateway.core.logging.logger import get_logger
from vision_gateway.vision.models.detection import DetectionResult

logger = get_logger(__name__)


@dataclass
class ProviderConfig:
    """
    Configuration for a vision provider.

    Attributes:
        name: Provider name
        api_key: Subscription key
        endpoint: Resource endpoint URL
        timeout: HTTP timeout in seconds
        api_version: REST API version segment
        features: Feature categories requested on every analyze call
    """
    name: str
    api_key: str
    endpoint: str
    timeout: float = 30.0
    api_version: str = AZURE_VISION_API_VERSION
    features: list[VisualFeature] = field(
        default_factory=lambda: [VisualFeature.OBJECTS, VisualFeature.TAGS]
    )

    def __post_init__(self):
        missing = [name for name in ("api_key", "endpoint") if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                "Vision API credentials not found in configuration.",
                details={"provider": self.name, "missing": missing},
            )
        self.endpoint = self.endpoint.rstrip("/")
        try:
            self.features = [VisualFeature(feature) for feature in self.features]
        except ValueError as e:
            raise ConfigurationError.from_exception(
                e,
                message="Unsupported visual feature in configuration.",
                provider=self.name,
                features=[getattr(feature, "value", feature) for feature in self.features],
                supported=[feature.value for feature in VisualFeature],
            )

    @classmethod
    def from_settings(cls, settings, name: str = "azure") -> "ProviderConfig":
        """
        Build a config from Settings.

        Raises:
            ConfigurationError: If the key or endpoint is missing, or a feature is unsupported
        """
        vision = settings.vision
        return cls(
            name=name,
            api_key=vision.AZURE_VISION_API_KEY or "",
            endpoint=vision.AZURE_VISION_ENDPOINT or "",
            timeout=vision.AZURE_VISION_TIMEOUT,
            api_version=vision.AZURE_VISION_API_VERSION,
            features=list(vision.AZURE_VISION_FEATURES),
        )


class BaseVisionProvider(ABC):
    """
    Abstract base class for remote image-analysis providers.

    Subclasses must implement:
    - _analyze_internal(): the billed call
    - health_check(): a cheap reachability call
    - close(): release network resources

    Usage:
        class AzureVisionProvider(BaseVisionProvider):
            async def _analyze_internal(self, image_bytes, features):
                ...
    """

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.name = config.name
        self._calls = 0
        self._failures = 0

        logger.info(
            "Provider initialized",
            stage=Stage.PROVIDER.value,
            provider=config.name,
            endpoint=config.endpoint[:50] + "..." if len(config.endpoint) > 50 else config.endpoint,
        )

    async def analyze(
        self,
        image_bytes: bytes,
        features: list[VisualFeature] | None = None,
    ) -> DetectionResult:
        """
        Analyze one still image.

        Args:
            image_bytes: Raw encoded image (JPEG/PNG/BMP)
            features: Feature categories (default from config)

        Returns:
            DetectionResult built from the response

        Raises:
            TransientRequestError: On timeouts, transport errors, 408/429/5xx
            PermanentRequestError: On any other failure
        """
        features = features or self.config.features
        self._calls += 1

        logger.info(
            "Analyzing image",
            stage=Stage.PROVIDER.value,
            provider=self.name,
            image_size=len(image_bytes),
            features=[feature.value for feature in features],
        )

        try:
            result = await self._analyze_internal(image_bytes, features)
        except Exception as e:
            self._failures += 1
            logger.warning(
                "Analyze failed",
                stage=Stage.PROVIDER.value,
                provider=self.name,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        logger.info(
            "Analyze completed",
            stage=Stage.PROVIDER.value,
            provider=self.name,
            detections=len(result.detections),
            tags=len(result.tags),
        )
        return result

    @abstractmethod
    async def _analyze_internal(
        self,
        image_bytes: bytes,
        features: list[VisualFeature],
    ) -> DetectionResult:
        """Provider-specific analyze call."""
        pass

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """
        Cheap reachability check (not billed against the quota).

        Raises on failure; returns provider-specific details on success.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying client."""
        pass

    def get_stats(self) -> dict[str, Any]:
        return {
            "provider": self.name,
            "calls": self._calls,
            "failures": self._failures,
            "config": {
                "timeout": self.config.timeout,
                "api_version": self.config.api_version,
                "features": [feature.value for feature in self.config.features],
            },
        }
