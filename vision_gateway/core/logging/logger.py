#!/usr/bin/env python3
"""
Structured Logging Module using structlog

This module provides structured logging with:
- Cycle ID correlation for tracing one gateway request cycle
- Stage numbering for execution flow
- JSON or console formatting
- Automatic secret redaction (subscription keys never reach the logs)

Author: System Architect
Date: 2026-10-02
"""

import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, WrappedLogger

from vision_gateway.core.config.settings import get_settings

# Context variable for the current request cycle
cycle_id_ctx: ContextVar[str | None] = ContextVar("cycle_id", default=None)

# Azure subscription keys are 32 hex characters
_SUBSCRIPTION_KEY_PATTERN = re.compile(r"\b[0-9a-fA-F]{32}\b")
_BEARER_PATTERN = re.compile(r"(?i)\bbearer\s+[a-z0-9._~+/-]+=*")
_SECRET_FIELDS = {"api_key", "subscription_key", "AZURE_VISION_API_KEY"}


def add_cycle_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add cycle ID to log event from context variable.

    STAGE-L.1: Cycle ID injection
    """
    cycle_id = cycle_id_ctx.get()
    if cycle_id:
        event_dict["cycle_id"] = cycle_id
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add ISO timestamp to log event.

    STAGE-L.2: Timestamp injection
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact credentials from log events.

    STAGE-L.3: Secret redaction

    Patterns redacted:
    - Azure subscription keys (32 hex chars) → [REDACTED]
    - Bearer tokens → [REDACTED]
    - Known secret fields are replaced wholesale
    """
    for field in _SECRET_FIELDS & event_dict.keys():
        event_dict[field] = "[REDACTED]"

    message = event_dict.get("event", "")
    if isinstance(message, str):
        message = _SUBSCRIPTION_KEY_PATTERN.sub("[REDACTED]", message)
        message = _BEARER_PATTERN.sub("[REDACTED]", message)
        event_dict["event"] = message

    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Upper-case the level name.

    STAGE-L.4: Log level injection
    """
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    STAGE-L: Logging initialization

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    settings = get_settings()

    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    # Configure standard library logging (tenacity logs through it)
    logging.basicConfig(
        format="%(message)s", stream=sys.stderr, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_cycle_id,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage=Stage.CACHE_LOOKUP)
    """
    return structlog.get_logger(name)


def set_cycle_id(cycle_id: str) -> None:
    """
    Set cycle ID in context for the current request cycle.

    Called when a gateway cycle enters BUSY.
    """
    cycle_id_ctx.set(cycle_id)


def get_cycle_id() -> str | None:
    """Get current cycle ID from context."""
    return cycle_id_ctx.get()


def clear_cycle_id() -> None:
    """
    Clear cycle ID from context.

    STAGE-8: Cycle cleanup
    """
    cycle_id_ctx.set(None)
