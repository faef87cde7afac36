"""
Startup Connectivity Probe

One-shot reachability check run before dependent subsystems (capture,
display) are initialized. The health operation goes through the
RetryExecutor with a fixed policy: 3 attempts, exponential backoff from 1s.

Every probe failure is retried, whatever its kind: at startup an auth error
and a network blip look the same to the user, and the probe is cheap.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from vision_gateway.core.config.constants import (
    PROBE_BASE_DELAY,
    PROBE_MAX_ATTEMPTS,
    RETRY_ATTEMPT_TIMEOUT,
    ErrorKind,
    Stage,
)
from vision_gateway.core.exceptions import ConnectivityError
from vision_gateway.core.logging.logger import get_logger
from vision_gateway.core.resilience.retry_executor import RetryExecutor, RetryPolicy, SleepFn

logger = get_logger(__name__)

PROBE_POLICY = RetryPolicy(
    max_attempts=PROBE_MAX_ATTEMPTS,
    base_delay=PROBE_BASE_DELAY,
    attempt_timeout=RETRY_ATTEMPT_TIMEOUT,
)


def _always_transient(exc: BaseException) -> ErrorKind:
    return ErrorKind.TRANSIENT


class ConnectivityProbe:
    """
    Connectivity health check.

    Usage:
        probe = ConnectivityProbe()
        if await probe.check(provider.health_check):
            start_camera()
        else:
            logger.error("running degraded", reason=probe.last_error)
    """

    def __init__(self, executor: RetryExecutor | None = None, sleep: SleepFn = asyncio.sleep):
        self._executor = executor or RetryExecutor(classifier=_always_transient, sleep=sleep)
        self.last_error: ConnectivityError | None = None
        self.attempts = 0

    async def check(
        self,
        health_operation: Callable[[], Awaitable[Any]] | Callable[[], Any],
        policy: RetryPolicy | None = None,
    ) -> bool:
        """
        Run ``health_operation`` until it succeeds or the policy is exhausted.

        Returns:
            True on any success, False if every attempt failed. A failure is
            also recorded on ``last_error`` as a ConnectivityError.
        """
        policy = policy or PROBE_POLICY
        logger.info("Probing remote service", stage=Stage.PROBE.value, max_attempts=policy.max_attempts)

        result = await self._executor.execute(health_operation, policy)
        self.attempts = result.attempts

        if result.ok:
            self.last_error = None
            logger.info("Remote service reachable", stage=Stage.PROBE.value, attempts=result.attempts)
            return True

        self.last_error = ConnectivityError.from_exception(
            result.error,
            message="All connection attempts failed",
            attempts=result.attempts,
        )
        logger.error(
            "All connection attempts failed",
            stage=Stage.PROBE.value,
            attempts=result.attempts,
            error=str(result.error),
        )
        return False

    async def require(
        self,
        health_operation: Callable[[], Awaitable[Any]] | Callable[[], Any],
        policy: RetryPolicy | None = None,
    ) -> None:
        """Like ``check`` but raise ConnectivityError on failure."""
        if not await self.check(health_operation, policy):
            raise self.last_error
