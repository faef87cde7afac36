"""
Lifecycle Exceptions

Author: System Architect
Date: 2026-10-02
"""

from vision_gateway.core.exceptions.base import VisionGatewayError


class DisposedError(VisionGatewayError):
    """
    Raised when a closed gateway is used again.

    This is a caller bug, so it is never swallowed by the gateway.
    """
    pass
