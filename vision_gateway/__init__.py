"""
Vision Gateway

Budget-aware gateway between a constrained client and a remote
image-analysis service: call quota, content-addressed caching, retry with
backoff, and single-flight request cycles.
"""

from vision_gateway.core.config.constants import CycleOutcome, GatewayState
from vision_gateway.core.resilience import ConnectivityProbe, RetryExecutor, RetryPolicy
from vision_gateway.infrastructure.cache import ContentCache
from vision_gateway.rate_limiting import QuotaTracker
from vision_gateway.vision.models import DetectionResult
from vision_gateway.vision.services import RequestGateway, VisionSession

__version__ = "1.0.0"

__all__ = [
    "ConnectivityProbe",
    "ContentCache",
    "CycleOutcome",
    "DetectionResult",
    "GatewayState",
    "QuotaTracker",
    "RequestGateway",
    "RetryExecutor",
    "RetryPolicy",
    "VisionSession",
]
