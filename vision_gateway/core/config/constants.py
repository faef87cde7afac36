"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the vision gateway.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for state management

Author: System Architect
Date: 2026-10-02
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Request cycle stages used as the ``stage=`` field of every log line.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}
    - SEQUENCE: Numeric order for the request cycle, alphabetic prefix for
      cross-cutting concerns
    - DESCRIPTIVE_NAME: Clear, uppercase description with underscores
    """

    # Request cycle (sequential 0.0 - 8.0)
    INITIALIZATION = "0.0_INITIALIZATION"
    QUOTA_CHECK = "1.0_QUOTA_CHECK"
    SINGLE_FLIGHT = "2.0_SINGLE_FLIGHT"
    LOCAL_PROCESSING = "3.0_LOCAL_PROCESSING"
    CAPTURE = "4.0_CAPTURE"
    CACHE_LOOKUP = "5.0_CACHE_LOOKUP"
    REMOTE_ANALYSIS = "6.0_REMOTE_ANALYSIS"
    DISPLAY = "7.0_DISPLAY"
    CLEANUP = "8.0_CLEANUP"

    # Cross-cutting concerns
    RETRY = "R_RETRY_LOGIC"
    PROBE = "P_CONNECTIVITY_PROBE"
    QUOTA = "Q_QUOTA_TRACKING"
    CACHE = "C_CONTENT_CACHE"
    PROVIDER = "V_VISION_PROVIDER"
    SESSION = "S_SESSION_LIFECYCLE"
    LOGGING = "L_LOGGING_OPERATIONS"


# ============================================================================
# Gateway States
# ============================================================================


class GatewayState(str, Enum):
    """
    Request gateway state machine.

    IDLE -> BUSY -> {LOCAL_HANDLED | CACHE_HIT | REMOTE_SUCCEEDED |
    REMOTE_FAILED | QUOTA_BLOCKED} -> IDLE

    DISPOSED is terminal.
    """

    IDLE = "idle"
    BUSY = "busy"
    DISPOSED = "disposed"


class CycleOutcome(str, Enum):
    """
    Terminal outcome of one ``RequestGateway.process`` call.

    DROPPED: another cycle was in flight, nothing happened
    CAPTURE_FAILED: capture or local processing raised, nothing was billed
    ABANDONED: the gateway was closed mid-cycle; nothing was cached or displayed
    """

    LOCAL_HANDLED = "local_handled"
    CACHE_HIT = "cache_hit"
    REMOTE_SUCCEEDED = "remote_succeeded"
    REMOTE_FAILED = "remote_failed"
    QUOTA_BLOCKED = "quota_blocked"
    DROPPED = "dropped"
    CAPTURE_FAILED = "capture_failed"
    ABANDONED = "abandoned"


# ============================================================================
# Error Classification
# ============================================================================


class ErrorKind(str, Enum):
    """
    Retry classification of a failed attempt.

    TRANSIENT: timeout, I/O or connectivity failure (worth paying latency for)
    PERMANENT: anything else (abort immediately)
    """

    TRANSIENT = "transient"
    PERMANENT = "permanent"


# ============================================================================
# Quota Periods
# ============================================================================


class QuotaPeriod(str, Enum):
    """
    Quota rollover policy.

    NONE: consumed calls are never reset for the lifetime of the process
    MONTHLY: consumed calls reset at the start of each calendar month (UTC)
    """

    NONE = "none"
    MONTHLY = "monthly"


# ============================================================================
# Visual Features
# ============================================================================


class VisualFeature(str, Enum):
    """Feature categories requested from the remote analysis service."""

    OBJECTS = "Objects"
    TAGS = "Tags"


# ============================================================================
# Defaults
# ============================================================================

# Quota
DEFAULT_QUOTA_LIMIT = 5000  # Free tier transactions per period

# Cache
DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60  # 24 hours

# Retry settings
MAX_RETRIES = 3  # Maximum attempts (first try included)
RETRY_BASE_DELAY = 1.0  # Base delay for exponential backoff (seconds)
RETRY_ATTEMPT_TIMEOUT = 30.0  # Per-attempt timeout for remote calls (seconds)
CAPTURE_TIMEOUT = 10.0  # Capture must complete within 10s

# Connectivity probe (fixed policy)
PROBE_MAX_ATTEMPTS = 3
PROBE_BASE_DELAY = 1.0

# Azure Computer Vision
AZURE_VISION_API_VERSION = "v3.2"
HEADER_SUBSCRIPTION_KEY = "Ocp-Apim-Subscription-Key"

# HTTP status codes that are worth retrying
TRANSIENT_HTTP_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
