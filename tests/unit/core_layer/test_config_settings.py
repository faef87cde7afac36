"""
Unit Tests for Settings
"""

import pytest
from pydantic import ValidationError

from vision_gateway.core.config import get_settings, reload_settings
from vision_gateway.core.config.constants import QuotaPeriod
from vision_gateway.core.config.settings import Settings

ENV_VARS = [
    "AZURE_VISION_API_KEY",
    "AZURE_VISION_ENDPOINT",
    "QUOTA_LIMIT",
    "QUOTA_PERIOD",
    "CACHE_TTL_SECONDS",
    "RETRY_MAX_ATTEMPTS",
    "RETRY_BASE_DELAY",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.unit
class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)

        assert settings.AZURE_VISION_API_KEY is None
        assert settings.quota.QUOTA_LIMIT == 5000
        assert settings.quota.QUOTA_PERIOD is QuotaPeriod.NONE
        assert settings.cache.CACHE_TTL_SECONDS == 86400
        assert settings.retry.RETRY_MAX_ATTEMPTS == 3
        assert settings.retry.RETRY_BASE_DELAY == 1.0
        assert settings.vision.AZURE_VISION_API_VERSION == "v3.2"
        assert settings.vision.AZURE_VISION_FEATURES == ["Objects", "Tags"]

    def test_reads_environment(self, clean_env):
        clean_env.setenv("AZURE_VISION_API_KEY", "env-key")
        clean_env.setenv("AZURE_VISION_ENDPOINT", "https://env.cognitiveservices.azure.com/")
        clean_env.setenv("QUOTA_LIMIT", "20")
        clean_env.setenv("QUOTA_PERIOD", "monthly")

        settings = Settings(_env_file=None)

        assert settings.vision.AZURE_VISION_API_KEY == "env-key"
        assert settings.vision.AZURE_VISION_ENDPOINT == "https://env.cognitiveservices.azure.com"
        assert settings.quota.QUOTA_LIMIT == 20
        assert settings.quota.QUOTA_PERIOD is QuotaPeriod.MONTHLY

    def test_blank_endpoint_becomes_none(self, clean_env):
        assert Settings(_env_file=None, AZURE_VISION_ENDPOINT="  ").AZURE_VISION_ENDPOINT is None

    def test_log_level_normalized(self, clean_env):
        assert Settings(_env_file=None, LOG_LEVEL="debug").logging.LOG_LEVEL == "DEBUG"

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="LOUD")

    @pytest.mark.parametrize(
        "field,value",
        [("QUOTA_LIMIT", -1), ("CACHE_TTL_SECONDS", 0), ("RETRY_MAX_ATTEMPTS", 0)],
    )
    def test_bounds(self, clean_env, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_get_settings_is_cached_and_reloadable(self, clean_env):
        first = get_settings()
        assert get_settings() is first
        assert reload_settings() is not first
