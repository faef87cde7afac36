"""
Gateway Error Base

Every error raised by the gateway, its providers and its capture sources
derives from ``VisionGatewayError``. Each one can be logged as a flat dict,
so the request cycle can turn any failure into a structured log line
without knowing its concrete type.

``ConfigurationError`` is defined alongside the base: it is the only error
that escapes gateway construction.

Author: System Architect
Date: 2026-10-02
"""

from typing import Any


class VisionGatewayError(Exception):
    """
    Root of the gateway error tree.

    Attributes:
        message: Human-readable summary
        cycle_id: Request cycle the error belongs to, when raised inside one
        details: Extra context for the log line (status codes, paths, ...)

    Example:
        raise CaptureError("Image file is empty", details={"path": "/tmp/frame.jpg"})
    """

    def __init__(
        self, message: str, cycle_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.cycle_id = cycle_id
        self.details = dict(details or {})
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Flatten into the fields logged at the gateway boundary."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "cycle_id": self.cycle_id,
            "details": self.details,
        }

    def with_context(self, **context) -> "VisionGatewayError":
        """Merge ``context`` into ``details`` and return self."""
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        parts = [f"message='{self.message}'"]
        if self.cycle_id:
            parts.append(f"cycle_id='{self.cycle_id}'")
        if self.details:
            parts.append(f"details={self.details}")
        return f"{type(self).__name__}({', '.join(parts)})"

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        message: str | None = None,
        cycle_id: str | None = None,
        **details
    ) -> "VisionGatewayError":
        """
        Wrap a library exception (httpx, OSError, pydantic) as this error type.

        The original type and text are kept in ``details`` as
        ``original_error`` / ``original_message``.
        """
        return cls(
            message or str(exc) or type(exc).__name__,
            cycle_id=cycle_id,
            details={
                "original_error": type(exc).__name__,
                "original_message": str(exc),
                **details,
            },
        )


class ConfigurationError(VisionGatewayError):
    """
    Missing or invalid configuration (credentials, features, retry values).

    Raised while building the gateway and never retried.
    """
