"""
Unit Tests for the structlog configuration and processors.
"""

import pytest

from vision_gateway.core.config.constants import Stage
from vision_gateway.core.logging.logger import (
    add_cycle_id,
    add_log_level_name,
    clear_cycle_id,
    get_cycle_id,
    get_logger,
    redact_secrets,
    set_cycle_id,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_cycle_id():
    clear_cycle_id()
    yield
    clear_cycle_id()


@pytest.mark.unit
class TestProcessors:
    def test_add_cycle_id(self):
        set_cycle_id("cycle-42")
        assert add_cycle_id(None, "info", {"event": "x"})["cycle_id"] == "cycle-42"

    def test_add_cycle_id_absent(self):
        assert "cycle_id" not in add_cycle_id(None, "info", {"event": "x"})

    def test_cycle_id_roundtrip(self):
        set_cycle_id("abc")
        assert get_cycle_id() == "abc"
        clear_cycle_id()
        assert get_cycle_id() is None

    def test_redacts_subscription_key_in_message(self):
        event = redact_secrets(None, "info", {"event": "key=0123456789abcdef0123456789abcdef used"})
        assert event["event"] == "key=[REDACTED] used"

    def test_redacts_bearer_token(self):
        event = redact_secrets(None, "info", {"event": "Authorization: Bearer eyJhbGciOi.abc"})
        assert "eyJhbGciOi" not in event["event"]

    def test_redacts_secret_fields(self):
        event = redact_secrets(None, "info", {"event": "init", "api_key": "secret"})
        assert event["api_key"] == "[REDACTED]"

    def test_level_upper_cased(self):
        assert add_log_level_name(None, "info", {"level": "info"})["level"] == "INFO"


@pytest.mark.unit
class TestSetup:
    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_setup_and_log(self, log_format):
        setup_logging(log_level="DEBUG", log_format=log_format)
        logger = get_logger("test")

        logger.info("hello", stage=Stage.LOGGING.value)
