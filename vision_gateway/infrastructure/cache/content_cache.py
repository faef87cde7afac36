#!/usr/bin/env python3
"""
Content-Addressed Result Cache

Maps a fingerprint of the raw image bytes to the DetectionResult the remote
service returned for them, so identical captures are never billed twice
within the TTL window.

Architecture:
    ContentCache (Public API)
        ├── fingerprint()  SHA-256 of the raw bytes (32-byte key)
        ├── get()          lazy TTL purge, then lookup
        └── put()          insert / overwrite with the current time

Invariants:
    - Every entry returned by get() has age (now - inserted_at) <= TTL.
    - Expired entries are removed before any lookup completes.
    - No size bound: growth within one TTL window is unbounded.

Concurrency:
    Not locked. The gateway only touches the cache inside its single-flight
    guard, so at most one cycle mutates it at a time.
"""

import hashlib
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from vision_gateway.core.config.constants import DEFAULT_CACHE_TTL_SECONDS, Stage
from vision_gateway.core.logging.logger import get_logger
from vision_gateway.vision.models.detection import DetectionResult

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """One cached analysis result."""

    fingerprint: bytes
    result: DetectionResult
    inserted_at: float

    def age(self, now: float) -> float:
        return now - self.inserted_at


class ContentCache:
    """
    In-memory fingerprint -> DetectionResult cache with lazy TTL expiry.

    Args:
        ttl_seconds: Maximum age of an entry when read (default 24 hours)
        clock: Time source in seconds; inject a fake clock in tests
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[bytes, CacheEntry] = {}

        # Statistics
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @staticmethod
    def fingerprint(data: bytes) -> bytes:
        """
        Deterministic content hash of the raw input.

        Equal inputs always give equal fingerprints; this is the cache key.
        """
        return hashlib.sha256(data).digest()

    def purge_expired(self) -> int:
        """Drop every entry older than the TTL. Returns how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.age(now) > self._ttl]
        for key in expired:
            del self._entries[key]

        if expired:
            self._evictions += len(expired)
            logger.debug("Purged expired entries", stage=Stage.CACHE.value, count=len(expired))
        return len(expired)

    def get(self, fingerprint: bytes) -> DetectionResult | None:
        """
        Look up a result. Purges expired entries first.

        Returns:
            The stored result unchanged on a hit, None on a miss
        """
        self.purge_expired()

        entry = self._entries.get(fingerprint)
        if entry is None:
            self._misses += 1
            return None

        self._hits += 1
        return entry.result

    def put(self, fingerprint: bytes, result: DetectionResult) -> None:
        """Insert or overwrite the entry for ``fingerprint`` stamped with the current time."""
        self._entries[fingerprint] = CacheEntry(
            fingerprint=fingerprint,
            result=result,
            inserted_at=self._clock(),
        )

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Drop everything (gateway shutdown)."""
        self._entries.clear()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "ttl_seconds": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
            "hit_rate": round(self._hits / total, 4) if total else 0.0,
        }
