"""
Bounded Retry with Exponential Backoff.

MECHANISM OF ACTION:
-------------------
1.  **Attempt**:
    The operation is awaited, optionally bounded by ``policy.attempt_timeout``.
    Whatever happens is captured in a ``CallResult``: the value on success, or
    the exception plus its ``ErrorKind`` tag on failure. Exceptions never escape
    an attempt, so the retry decision is made from the tag alone.

2.  **Decide** (tenacity ``retry_if_result``):
    - TRANSIENT and attempts remain -> sleep ``base_delay * 2**(i-1)`` then retry.
    - TRANSIENT and attempts exhausted -> surface the last transient failure.
    - PERMANENT -> abort immediately, no sleep, no further attempts.

3.  **Backoff** (tenacity ``wait_exponential``):
    Deterministic, no jitter, so tests can assert exact delays through an
    injected sleep function.

Each attempt is a fresh call; there is no cancellation token shared across
attempts. Cancelling the surrounding task cancels the current attempt and the
executor re-raises ``CancelledError``.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from vision_gateway.core.config.constants import (
    MAX_RETRIES,
    RETRY_ATTEMPT_TIMEOUT,
    RETRY_BASE_DELAY,
    ErrorKind,
    Stage,
)
from vision_gateway.core.exceptions import ConfigurationError, classify_error
from vision_gateway.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]] | Callable[[], T]
Classifier = Callable[[BaseException], ErrorKind]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry policy for one logical call.

    Attributes:
        max_attempts: Total attempts including the first (>= 1)
        base_delay: Delay before the second attempt in seconds; doubles after that
        attempt_timeout: Optional per-attempt timeout in seconds
    """

    max_attempts: int = MAX_RETRIES
    base_delay: float = RETRY_BASE_DELAY
    attempt_timeout: float | None = RETRY_ATTEMPT_TIMEOUT

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        if self.attempt_timeout is not None and self.attempt_timeout <= 0:
            raise ValueError("attempt_timeout must be > 0 or None")

    def delay_before(self, attempt_index: int) -> float:
        """Backoff delay before 0-indexed attempt ``attempt_index`` (0 for the first)."""
        if attempt_index < 1:
            return 0.0
        return self.base_delay * 2 ** (attempt_index - 1)

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        """
        Build the policy from the retry settings.

        Raises:
            ConfigurationError: If the configured values are out of range
        """
        retry = settings.retry
        try:
            return cls(
                max_attempts=retry.RETRY_MAX_ATTEMPTS,
                base_delay=retry.RETRY_BASE_DELAY,
                attempt_timeout=retry.RETRY_ATTEMPT_TIMEOUT,
            )
        except ValueError as e:
            raise ConfigurationError.from_exception(
                e,
                message="Invalid retry configuration.",
                max_attempts=retry.RETRY_MAX_ATTEMPTS,
                base_delay=retry.RETRY_BASE_DELAY,
                attempt_timeout=retry.RETRY_ATTEMPT_TIMEOUT,
            )


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """
    Tagged outcome of a retried call.

    Exactly one of ``value`` / ``error`` is meaningful, as indicated by ``ok``.
    ``kind`` is set only for failures.
    """

    value: T | None = None
    error: BaseException | None = None
    kind: ErrorKind | None = None
    attempts: int = 0
    delays: tuple[float, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_transient(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT

    def unwrap(self) -> T:
        """Return the value or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.value


def _should_retry(result: CallResult) -> bool:
    return not result.ok and result.is_transient


class RetryExecutor:
    """
    Generic bounded-retry-with-backoff wrapper.

    Usage:
        executor = RetryExecutor()
        result = await executor.execute(lambda: provider.analyze(image), RetryPolicy())
        if result.ok:
            display(result.value)
    """

    def __init__(
        self,
        classifier: Classifier = classify_error,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._classify = classifier
        self._sleep = sleep
        # Tenacity needs a stdlib logger
        self._std_logger = logging.getLogger(__name__)

    async def _attempt(self, operation: Operation, policy: RetryPolicy, attempt_number: int) -> CallResult:
        try:
            outcome = operation()
            if inspect.isawaitable(outcome):
                if policy.attempt_timeout is not None:
                    outcome = await asyncio.wait_for(outcome, timeout=policy.attempt_timeout)
                else:
                    outcome = await outcome
            return CallResult(value=outcome, attempts=attempt_number)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            kind = self._classify(exc)
            logger.warning(
                "Attempt failed",
                stage=Stage.RETRY.value,
                attempt=attempt_number,
                max_attempts=policy.max_attempts,
                error_kind=kind.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return CallResult(error=exc, kind=kind, attempts=attempt_number)

    async def execute(self, operation: Operation, policy: RetryPolicy | None = None) -> CallResult:
        """
        Run ``operation`` under ``policy`` and return a tagged CallResult.

        Never raises for operation failures; only cancellation propagates.
        """
        policy = policy or RetryPolicy()
        delays: list[float] = []

        async def sleep(seconds: float) -> None:
            delays.append(seconds)
            await self._sleep(seconds)

        def give_up(retry_state: RetryCallState) -> CallResult:
            # Attempts exhausted on a transient failure: surface the last one
            return retry_state.outcome.result()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_exponential(multiplier=policy.base_delay, exp_base=2, min=0),
            retry=retry_if_result(_should_retry),
            sleep=sleep,
            before_sleep=before_sleep_log(self._std_logger, logging.WARNING),
            retry_error_callback=give_up,
            reraise=False,
        )

        start_time = time.perf_counter()
        attempt_number = 0

        async def attempt() -> CallResult:
            nonlocal attempt_number
            attempt_number += 1
            return await self._attempt(operation, policy, attempt_number)

        result: CallResult = await retrying(attempt)
        result = CallResult(
            value=result.value,
            error=result.error,
            kind=result.kind,
            attempts=result.attempts,
            delays=tuple(delays),
        )

        duration = (time.perf_counter() - start_time) * 1000
        if result.ok:
            logger.debug(
                "Call succeeded",
                stage=Stage.RETRY.value,
                attempts=result.attempts,
                duration_ms=round(duration, 2),
            )
        else:
            logger.error(
                "Call failed",
                stage=Stage.RETRY.value,
                attempts=result.attempts,
                error_kind=result.kind.value,
                error=str(result.error),
                duration_ms=round(duration, 2),
            )
        return result

    async def call(self, operation: Operation, policy: RetryPolicy | None = None) -> Any:
        """Like ``execute`` but raise the surfaced error instead of returning it."""
        result = await self.execute(operation, policy)
        return result.unwrap()
