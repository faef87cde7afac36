"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .clock import FakeClock, SleepRecorder
from .payloads import ANALYZE_PAYLOAD, MODELS_PAYLOAD
from .provider_factory import ProviderTestFactory

__all__ = ["ANALYZE_PAYLOAD", "MODELS_PAYLOAD", "FakeClock", "SleepRecorder", "ProviderTestFactory"]
