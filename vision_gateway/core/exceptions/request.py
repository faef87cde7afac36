"""
Remote Request Exceptions

Errors raised by the billed remote analysis call. Each class carries an
``error_kind`` tag that the RetryExecutor reads to decide between retrying
and aborting.

Author: System Architect
Date: 2026-10-02
"""

from vision_gateway.core.config.constants import ErrorKind
from vision_gateway.core.exceptions.base import VisionGatewayError


class RequestError(VisionGatewayError):
    """Base exception for remote analysis request errors."""

    error_kind: ErrorKind = ErrorKind.PERMANENT


class TransientRequestError(RequestError):
    """
    Raised when a remote call fails in a way worth retrying.

    Common causes:
    - Request timeout
    - Connection reset / DNS failure
    - Service throttling (HTTP 429)
    - Service-side errors (HTTP 5xx)
    """

    error_kind = ErrorKind.TRANSIENT


class PermanentRequestError(RequestError):
    """
    Raised when a remote call fails in a way retrying cannot fix.

    Common causes:
    - Invalid or revoked subscription key (HTTP 401/403)
    - Unsupported image format or size (HTTP 400/415)
    - Malformed response payload
    """

    error_kind = ErrorKind.PERMANENT
