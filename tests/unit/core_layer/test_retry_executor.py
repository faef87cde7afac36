"""
Unit Tests for RetryExecutor

Tests bounded retry with exponential backoff: transient failures are retried
with 1s, 2s, ... delays, permanent failures abort after one attempt, and
exhausted retries surface the last error as a tagged CallResult.
"""

import asyncio

import httpx
import pytest

from tests.test_fixtures import ProviderTestFactory
from vision_gateway.core.config.constants import ErrorKind
from vision_gateway.core.exceptions import (
    ConfigurationError,
    PermanentRequestError,
    TransientRequestError,
    classify_error,
)
from vision_gateway.core.resilience.retry_executor import CallResult, RetryExecutor, RetryPolicy

NO_TIMEOUT = RetryPolicy(max_attempts=3, base_delay=1.0, attempt_timeout=None)


@pytest.mark.unit
class TestRetryPolicy:
    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.base_delay == 1.0

    def test_delay_before_doubles(self):
        policy = RetryPolicy(max_attempts=4, base_delay=0.5)
        assert [policy.delay_before(i) for i in range(4)] == [0.0, 0.5, 1.0, 2.0]

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_attempts": 0}, {"base_delay": -1.0}, {"attempt_timeout": 0}],
    )
    def test_invalid_policy_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_from_settings(self, settings):
        policy = RetryPolicy.from_settings(settings)
        assert policy.max_attempts == settings.RETRY_MAX_ATTEMPTS
        assert policy.base_delay == settings.RETRY_BASE_DELAY

    def test_from_settings_out_of_range(self, settings):
        settings.RETRY_ATTEMPT_TIMEOUT = 0

        with pytest.raises(ConfigurationError) as exc_info:
            RetryPolicy.from_settings(settings)
        assert exc_info.value.details["attempt_timeout"] == 0


@pytest.mark.unit
class TestClassifyError:
    @pytest.mark.parametrize(
        "exc",
        [
            TransientRequestError("throttled"),
            TimeoutError(),
            asyncio.TimeoutError(),
            ConnectionResetError(),
            OSError("network unreachable"),
            httpx.ConnectError("refused"),
        ],
    )
    def test_transient(self, exc):
        assert classify_error(exc) is ErrorKind.TRANSIENT

    @pytest.mark.parametrize(
        "exc",
        [PermanentRequestError("401"), ValueError("bad image"), KeyError("objects")],
    )
    def test_permanent(self, exc):
        assert classify_error(exc) is ErrorKind.PERMANENT

    def test_explicit_tag_wins_over_type(self):
        class TaggedOSError(OSError):
            error_kind = ErrorKind.PERMANENT

        assert classify_error(TaggedOSError()) is ErrorKind.PERMANENT


@pytest.mark.unit
class TestRetryExecutor:
    @pytest.mark.asyncio
    async def test_success_first_attempt(self, retry_executor, sleep_recorder):
        operation = ProviderTestFactory.scripted_operation("ok")

        result = await retry_executor.execute(operation, NO_TIMEOUT)

        assert result.ok
        assert result.value == "ok"
        assert result.attempts == 1
        assert result.delays == ()
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_transient_twice_then_success(self, retry_executor, sleep_recorder):
        operation = ProviderTestFactory.scripted_operation(
            TransientRequestError("timeout"),
            TransientRequestError("timeout"),
            "labels",
        )

        result = await retry_executor.execute(operation, NO_TIMEOUT)

        assert result.ok
        assert result.value == "labels"
        assert result.attempts == 3
        assert sleep_recorder.delays == [1.0, 2.0]
        assert result.delays == (1.0, 2.0)

    @pytest.mark.asyncio
    async def test_permanent_failure_aborts_immediately(self, retry_executor, sleep_recorder):
        operation = ProviderTestFactory.always_permanent()

        result = await retry_executor.execute(operation, NO_TIMEOUT)

        assert not result.ok
        assert result.kind is ErrorKind.PERMANENT
        assert isinstance(result.error, PermanentRequestError)
        assert result.attempts == 1
        assert operation.state["calls"] == 1
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_transient_exhaustion_surfaces_last_error(self, retry_executor, sleep_recorder):
        errors = [TransientRequestError(f"timeout {i}") for i in range(3)]
        operation = ProviderTestFactory.scripted_operation(*errors)

        result = await retry_executor.execute(operation, NO_TIMEOUT)

        assert not result.ok
        assert result.is_transient
        assert result.error is errors[-1]
        assert result.attempts == 3
        assert operation.state["calls"] == 3
        assert sleep_recorder.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_transient_then_permanent_stops(self, retry_executor, sleep_recorder):
        operation = ProviderTestFactory.scripted_operation(
            TransientRequestError("503"),
            PermanentRequestError("401"),
            "never",
        )

        result = await retry_executor.execute(operation, NO_TIMEOUT)

        assert result.kind is ErrorKind.PERMANENT
        assert result.attempts == 2
        assert sleep_recorder.delays == [1.0]

    @pytest.mark.asyncio
    async def test_single_attempt_policy_never_sleeps(self, retry_executor, sleep_recorder):
        operation = ProviderTestFactory.scripted_operation(TransientRequestError("timeout"))

        result = await retry_executor.execute(
            operation, RetryPolicy(max_attempts=1, base_delay=1.0, attempt_timeout=None)
        )

        assert result.attempts == 1
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_attempt_timeout_is_transient(self, retry_executor, sleep_recorder):
        async def hangs():
            await asyncio.sleep(10)

        result = await retry_executor.execute(
            hangs, RetryPolicy(max_attempts=2, base_delay=1.0, attempt_timeout=0.01)
        )

        assert result.is_transient
        assert isinstance(result.error, asyncio.TimeoutError)
        assert result.attempts == 2
        assert sleep_recorder.delays == [1.0]

    @pytest.mark.asyncio
    async def test_sync_operation_supported(self, retry_executor):
        result = await retry_executor.execute(lambda: 42, NO_TIMEOUT)
        assert result.value == 42

    @pytest.mark.asyncio
    async def test_custom_classifier(self, sleep_recorder):
        executor = RetryExecutor(classifier=lambda exc: ErrorKind.TRANSIENT, sleep=sleep_recorder)
        operation = ProviderTestFactory.scripted_operation(ValueError("flaky"), "ok")

        result = await executor.execute(operation, NO_TIMEOUT)

        assert result.ok
        assert result.attempts == 2

    @pytest.mark.asyncio
    async def test_call_unwraps_or_raises(self, retry_executor):
        assert await retry_executor.call(lambda: "ok", NO_TIMEOUT) == "ok"

        with pytest.raises(PermanentRequestError):
            await retry_executor.call(ProviderTestFactory.always_permanent(), NO_TIMEOUT)

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, retry_executor):
        started = asyncio.Event()

        async def blocks():
            started.set()
            await asyncio.Event().wait()

        task = asyncio.create_task(retry_executor.execute(blocks, NO_TIMEOUT))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.unit
class TestCallResult:
    def test_unwrap_success(self):
        assert CallResult(value="x", attempts=1).unwrap() == "x"

    def test_unwrap_failure(self):
        error = PermanentRequestError("nope")
        result = CallResult(error=error, kind=ErrorKind.PERMANENT, attempts=1)
        assert not result.ok
        assert not result.is_transient
        with pytest.raises(PermanentRequestError):
            result.unwrap()
