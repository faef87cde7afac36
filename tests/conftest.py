"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import pytest

from tests.test_fixtures import FakeClock, ProviderTestFactory, SleepRecorder
from vision_gateway.core.config.settings import Settings
from vision_gateway.core.resilience.retry_executor import RetryExecutor, RetryPolicy
from vision_gateway.infrastructure.cache.content_cache import ContentCache
from vision_gateway.rate_limiting.quota_tracker import QuotaTracker
from vision_gateway.vision.models.detection import DetectionResult
from vision_gateway.vision.services.request_gateway import RequestGateway

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings():
    """
    Settings with test credentials, built from explicit values so that the
    developer's environment and .env never leak into tests.
    """
    return Settings(
        _env_file=None,
        AZURE_VISION_API_KEY="0123456789abcdef0123456789abcdef",
        AZURE_VISION_ENDPOINT="https://test-vision.cognitiveservices.azure.com/",
        QUOTA_LIMIT=5000,
        CACHE_TTL_SECONDS=86400,
        RETRY_MAX_ATTEMPTS=3,
        RETRY_BASE_DELAY=1.0,
    )


@pytest.fixture
def settings_without_credentials():
    return Settings(_env_file=None, AZURE_VISION_API_KEY=None, AZURE_VISION_ENDPOINT=None)


# ============================================================================
# Time Fixtures
# ============================================================================


@pytest.fixture
def fake_clock():
    """Monotonic fake clock in seconds, advanced explicitly by tests."""
    return FakeClock(start=1_700_000_000.0)


@pytest.fixture
def sleep_recorder():
    """Async sleep replacement that records requested delays and returns at once."""
    return SleepRecorder()


# ============================================================================
# Component Fixtures
# ============================================================================


@pytest.fixture
def sample_result():
    return DetectionResult.of(("cup", 0.92, (10, 20, 0)))


@pytest.fixture
def sample_image_bytes():
    return b"\xff\xd8\xff\xe0" + b"fake-jpeg-payload" * 8


@pytest.fixture
def fake_provider(sample_result):
    return ProviderTestFactory.success_provider(result=sample_result)


@pytest.fixture
def retry_executor(sleep_recorder):
    return RetryExecutor(sleep=sleep_recorder)


@pytest.fixture
def content_cache(fake_clock):
    return ContentCache(ttl_seconds=86400, clock=fake_clock)


@pytest.fixture
def quota_tracker():
    return QuotaTracker(limit=5000)


@pytest.fixture
async def gateway(settings, fake_provider, retry_executor, content_cache, quota_tracker):
    """
    Gateway wired with the fake provider, a recording sleep and a fake clock.

    Closed after the test.
    """
    gateway = RequestGateway(
        settings,
        provider=fake_provider,
        quota=quota_tracker,
        cache=content_cache,
        executor=retry_executor,
        retry_policy=RetryPolicy(max_attempts=3, base_delay=1.0, attempt_timeout=None),
    )
    yield gateway
    await gateway.close()
