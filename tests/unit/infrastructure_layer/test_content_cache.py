"""
Unit Tests for ContentCache

Deterministic SHA-256 fingerprints and lazy 24h TTL expiry, driven by a fake
clock.
"""

import pytest

from vision_gateway.infrastructure.cache.content_cache import ContentCache

DAY = 24 * 60 * 60


@pytest.mark.unit
class TestFingerprint:
    def test_deterministic(self, sample_image_bytes):
        assert ContentCache.fingerprint(sample_image_bytes) == ContentCache.fingerprint(
            bytes(sample_image_bytes)
        )

    def test_sha256_size(self):
        assert len(ContentCache.fingerprint(b"x")) == 32

    def test_single_bit_change(self, sample_image_bytes):
        flipped = bytearray(sample_image_bytes)
        flipped[-1] ^= 0x01
        assert ContentCache.fingerprint(bytes(flipped)) != ContentCache.fingerprint(sample_image_bytes)

    def test_known_digest(self):
        assert ContentCache.fingerprint(b"").hex() == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )


@pytest.mark.unit
class TestContentCache:
    def test_miss_then_hit(self, content_cache, sample_result):
        key = ContentCache.fingerprint(b"frame")
        assert content_cache.get(key) is None

        content_cache.put(key, sample_result)

        assert content_cache.get(key) is sample_result
        assert len(content_cache) == 1
        assert content_cache.stats()["hits"] == 1
        assert content_cache.stats()["misses"] == 1

    def test_entry_valid_at_exact_ttl(self, content_cache, fake_clock, sample_result):
        key = ContentCache.fingerprint(b"frame")
        content_cache.put(key, sample_result)

        fake_clock.advance(DAY)

        assert content_cache.get(key) is sample_result

    def test_entry_expires_after_ttl(self, content_cache, fake_clock, sample_result):
        key = ContentCache.fingerprint(b"frame")
        content_cache.put(key, sample_result)

        fake_clock.advance(DAY + 1)

        assert content_cache.get(key) is None
        assert len(content_cache) == 0
        assert content_cache.stats()["evictions"] == 1

    def test_lookup_purges_all_expired(self, content_cache, fake_clock, sample_result):
        old = ContentCache.fingerprint(b"old")
        content_cache.put(old, sample_result)
        fake_clock.advance(DAY - 10)
        fresh = ContentCache.fingerprint(b"fresh")
        content_cache.put(fresh, sample_result)
        fake_clock.advance(20)

        assert content_cache.get(fresh) is sample_result
        assert len(content_cache) == 1

    def test_put_overwrites_and_restamps(self, content_cache, fake_clock, sample_result):
        key = ContentCache.fingerprint(b"frame")
        content_cache.put(key, sample_result)
        fake_clock.advance(DAY - 1)
        content_cache.put(key, sample_result)
        fake_clock.advance(10)

        assert content_cache.get(key) is sample_result

    def test_clear(self, content_cache, sample_result):
        content_cache.put(ContentCache.fingerprint(b"a"), sample_result)
        content_cache.clear()
        assert len(content_cache) == 0

    def test_invalid_ttl(self):
        with pytest.raises(ValueError):
            ContentCache(ttl_seconds=0)
