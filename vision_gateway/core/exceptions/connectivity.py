"""
Connectivity Exceptions

Author: System Architect
Date: 2026-10-02
"""

from vision_gateway.core.exceptions.base import VisionGatewayError


class ConnectivityError(VisionGatewayError):
    """
    Raised (or recorded) when the startup connectivity probe exhausts its attempts.

    Non-fatal: the session keeps running in a degraded, capture-disabled mode.
    """
    pass
