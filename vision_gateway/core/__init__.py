"""
Core Module

Foundational components: configuration, logging, exceptions and resilience.
"""

from .exceptions import (
    CaptureError,
    ConfigurationError,
    ConnectivityError,
    DisposedError,
    PermanentRequestError,
    RequestError,
    TransientRequestError,
    VisionGatewayError,
    classify_error,
)
from .logging import (
    clear_cycle_id,
    get_cycle_id,
    get_logger,
    set_cycle_id,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_cycle_id",
    "get_cycle_id",
    "clear_cycle_id",
    "VisionGatewayError",
    "ConfigurationError",
    "ConnectivityError",
    "CaptureError",
    "DisposedError",
    "RequestError",
    "TransientRequestError",
    "PermanentRequestError",
    "classify_error",
]
