"""
Capture Exceptions

Author: System Architect
Date: 2026-10-02
"""

from vision_gateway.core.exceptions.base import VisionGatewayError


class CaptureError(VisionGatewayError):
    """
    Raised when a capture source cannot produce a still image.

    Common causes:
    - Camera / capture source not started or already released
    - Image file missing or unreadable
    - Capture timed out
    """
    pass
