"""
Error Classification

Maps any exception raised by a remote operation to an ``ErrorKind`` tag.

Order of precedence:
1. An explicit ``error_kind`` attribute on the exception (our request errors carry one)
2. Timeouts, OS-level I/O errors and httpx transport errors are TRANSIENT
3. Everything else is PERMANENT
"""

import asyncio

import httpx

from vision_gateway.core.config.constants import ErrorKind

TRANSIENT_EXCEPTION_TYPES: tuple[type[BaseException], ...] = (
    TimeoutError,
    asyncio.TimeoutError,
    OSError,  # IOError, ConnectionError and socket errors
    httpx.TransportError,  # timeouts, connect/read/write failures
)


def classify_error(exc: BaseException) -> ErrorKind:
    """Return the retry classification for ``exc``."""
    kind = getattr(exc, "error_kind", None)
    if isinstance(kind, ErrorKind):
        return kind
    if isinstance(exc, TRANSIENT_EXCEPTION_TYPES):
        return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT
