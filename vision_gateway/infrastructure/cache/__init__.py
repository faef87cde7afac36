"""
Cache Infrastructure

In-memory, content-addressed result cache. Nothing is persisted: the cache
lives and dies with its gateway.
"""

from .content_cache import CacheEntry, ContentCache

__all__ = ["CacheEntry", "ContentCache"]
