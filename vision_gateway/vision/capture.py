"""
Capture Sources

The gateway never talks to a camera directly; it calls a ``capture_fn``.
A CaptureSource bundles that function with the resource that has to be
released when the gateway closes.
"""

import asyncio
from pathlib import Path
from typing import Protocol, runtime_checkable

from vision_gateway.core.exceptions import CaptureError
from vision_gateway.core.logging.logger import get_logger

logger = get_logger(__name__)


@runtime_checkable
class CaptureSource(Protocol):
    """Anything that can produce one still image and be released afterwards."""

    async def capture(self) -> bytes:
        ...

    async def close(self) -> None:
        ...


class FileCaptureSource:
    """
    Reads a still image from disk on every capture.

    Stands in for a camera on desktops and in the CLI.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.closed = False

    async def capture(self) -> bytes:
        if self.closed:
            raise CaptureError("Capture source already released", details={"path": str(self.path)})
        try:
            data = await asyncio.to_thread(self.path.read_bytes)
        except OSError as e:
            raise CaptureError.from_exception(e, message="Could not read image", path=str(self.path))
        if not data:
            raise CaptureError("Image file is empty", details={"path": str(self.path)})
        return data

    async def close(self) -> None:
        if not self.closed:
            logger.debug("Capture source released", path=str(self.path))
        self.closed = True


class BytesCaptureSource:
    """Replays in-memory frames; useful for tests and batch jobs."""

    def __init__(self, *frames: bytes):
        if not frames:
            raise ValueError("at least one frame is required")
        self._frames = list(frames)
        self._index = 0
        self.closed = False

    async def capture(self) -> bytes:
        if self.closed:
            raise CaptureError("Capture source already released")
        frame = self._frames[min(self._index, len(self._frames) - 1)]
        self._index += 1
        return frame

    async def close(self) -> None:
        self.closed = True
