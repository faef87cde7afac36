"""
Request Gateway
===============

The gateway mediates every call from the headset client to the billed
remote analysis service. Its job is to make sure that:

- the call quota is never exceeded,
- identical images are never analyzed twice within the cache TTL,
- a flaky network never crashes the host session,
- at most one request cycle is ever in flight.

THE REQUEST CYCLE:
------------------

    process()
      │
      ├─ disposed?                 -> raise DisposedError (caller bug)
      ├─ quota remaining == 0?     -> QUOTA_BLOCKED (logged, no exception)
      ├─ another cycle in flight?  -> DROPPED (no side effects)
      │
      │  ── BUSY from here; every exit path returns to IDLE ──
      │
      ├─ local_process_fn()        -> handled? LOCAL_HANDLED (nothing billed)
      ├─ capture_fn()              -> raw bytes -> fingerprint
      ├─ cache.get(fingerprint)    -> hit? display, CACHE_HIT (nothing billed)
      ├─ quota.try_consume()       -> refused? QUOTA_BLOCKED
      ├─ remote_analyze_fn(bytes)  via RetryExecutor (3 attempts, 1s, 2s)
      │     ok   -> cache.put, display, REMOTE_SUCCEEDED
      │     fail -> logged, REMOTE_FAILED (never re-raised)
      │
      │  closed mid-cycle (after capture or the remote call)? -> ABANDONED
      ▼
    IDLE

SINGLE-FLIGHT:
--------------
The busy flag is a ``threading.Lock`` acquired with ``blocking=False``: the
test and the set happen in one atomic step, so two callers (two tasks, or
even two threads) can never both enter the cycle. Everything the cycle
mutates (quota, cache) is therefore touched by one cycle at a time and needs
no further locking.

CANCELLATION:
-------------
Capture is bounded by ``capture_timeout`` and every remote attempt by the
retry policy's ``attempt_timeout``. Cancelling the task running ``process``
cancels the current await; the guard is still released.
"""

import asyncio
import inspect
import threading
import uuid
from collections import Counter
from collections.abc import Awaitable, Callable
from typing import Any

from vision_gateway.core.config.constants import CycleOutcome, GatewayState, Stage
from vision_gateway.core.config.settings import Settings, get_settings
from vision_gateway.core.exceptions import (
    CaptureError,
    DisposedError,
    PermanentRequestError,
    VisionGatewayError,
)
from vision_gateway.core.logging.logger import clear_cycle_id, get_logger, set_cycle_id
from vision_gateway.core.resilience.retry_executor import RetryExecutor, RetryPolicy
from vision_gateway.infrastructure.cache.content_cache import ContentCache
from vision_gateway.rate_limiting.quota_tracker import QuotaTracker
from vision_gateway.vision.capture import CaptureSource
from vision_gateway.vision.models.detection import DetectionResult, ImageAnalysis
from vision_gateway.vision.providers.azure_provider import AzureVisionProvider
from vision_gateway.vision.providers.base_provider import BaseVisionProvider, ProviderConfig

logger = get_logger(__name__)

CaptureFn = Callable[[], Awaitable[bytes]] | Callable[[], bytes]
LocalProcessFn = (
    Callable[[], Awaitable[tuple[bool, DetectionResult | None]]]
    | Callable[[], tuple[bool, DetectionResult | None]]
)
RemoteAnalyzeFn = Callable[[bytes], Awaitable[Any]] | Callable[[bytes], Any]
DisplayFn = Callable[[DetectionResult], Awaitable[None]] | Callable[[DetectionResult], None]


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _to_detection_result(value: Any) -> DetectionResult:
    """Accept a DetectionResult, a parsed ImageAnalysis or a raw analyze payload."""
    if isinstance(value, DetectionResult):
        return value
    if isinstance(value, ImageAnalysis):
        return DetectionResult.from_analysis(value)
    if isinstance(value, dict):
        return DetectionResult.from_analysis(ImageAnalysis.model_validate(value))
    raise PermanentRequestError(
        "Remote analysis returned an unsupported payload",
        details={"payload_type": type(value).__name__},
    )


class RequestGateway:
    """
    Budget-aware, single-flight gateway to the remote analysis service.

    Construction validates configuration: a missing API key or endpoint
    raises ConfigurationError immediately. Quota and cache state belong to
    this instance only and are never persisted.

    Usage:
        async with RequestGateway(settings) as gateway:
            gateway.attach_capture(camera)
            await gateway.process(display_fn=render_labels)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        provider: BaseVisionProvider | None = None,
        quota: QuotaTracker | None = None,
        cache: ContentCache | None = None,
        executor: RetryExecutor | None = None,
        retry_policy: RetryPolicy | None = None,
        capture_timeout: float | None = None,
    ):
        """
        Args:
            settings: Application settings (default: global settings)
            provider: Remote provider (default: Azure provider built from settings)
            quota: Quota tracker (default: from settings)
            cache: Content cache (default: from settings)
            executor: Retry executor (default: classifying executor with asyncio.sleep)
            retry_policy: Policy for remote calls (default: from settings)
            capture_timeout: Capture timeout in seconds (default: from settings)

        Raises:
            ConfigurationError: If no provider is given and credentials are missing,
                or the retry settings are out of range
        """
        settings = settings if settings is not None else get_settings()
        self.settings = settings

        # Explicit None checks: an empty cache is falsy
        self._provider = (
            provider if provider is not None else AzureVisionProvider(ProviderConfig.from_settings(settings))
        )
        self._quota = quota if quota is not None else QuotaTracker.from_settings(settings)
        self._cache = (
            cache if cache is not None else ContentCache(ttl_seconds=settings.cache.CACHE_TTL_SECONDS)
        )
        self._executor = executor if executor is not None else RetryExecutor()
        self._policy = retry_policy if retry_policy is not None else RetryPolicy.from_settings(settings)
        self._capture_timeout = (
            capture_timeout if capture_timeout is not None else settings.retry.CAPTURE_TIMEOUT
        )

        self._capture_source: CaptureSource | None = None
        self._busy = threading.Lock()
        self._disposed = False
        self._last_outcome: CycleOutcome | None = None
        self._outcomes: Counter[CycleOutcome] = Counter()

        logger.info(
            "Gateway initialized",
            stage=Stage.INITIALIZATION.value,
            provider=self._provider.name,
            quota_limit=self._quota.limit,
            cache_ttl_seconds=self._cache.ttl_seconds,
            max_attempts=self._policy.max_attempts,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def provider(self) -> BaseVisionProvider:
        return self._provider

    @property
    def quota(self) -> QuotaTracker:
        return self._quota

    @property
    def cache(self) -> ContentCache:
        return self._cache

    @property
    def state(self) -> GatewayState:
        if self._disposed:
            return GatewayState.DISPOSED
        if self._busy.locked():
            return GatewayState.BUSY
        return GatewayState.IDLE

    @property
    def last_outcome(self) -> CycleOutcome | None:
        return self._last_outcome

    @property
    def closed(self) -> bool:
        return self._disposed

    def attach_capture(self, source: CaptureSource) -> None:
        """Register the capture resource used by default and released on close."""
        self._ensure_open()
        self._capture_source = source

    # ------------------------------------------------------------------
    # Request cycle
    # ------------------------------------------------------------------

    async def process(
        self,
        capture_fn: CaptureFn | None = None,
        local_process_fn: LocalProcessFn | None = None,
        remote_analyze_fn: RemoteAnalyzeFn | None = None,
        display_fn: DisplayFn | None = None,
    ) -> CycleOutcome:
        """
        Run one request cycle.

        Args:
            capture_fn: Produces one still image (default: attached capture source)
            local_process_fn: On-device shortcut returning (handled, result)
            remote_analyze_fn: Billed analysis of raw bytes (default: provider.analyze)
            display_fn: Rendering sink, fire-and-forget (default: log the labels)

        Returns:
            The cycle outcome. Failures are reported here and in the logs,
            never raised.

        Raises:
            DisposedError: If the gateway has been closed
        """
        self._ensure_open()

        # STAGE-1: quota pre-check
        if self._quota.remaining() <= 0:
            logger.warning(
                "Quota limit reached",
                stage=Stage.QUOTA_CHECK.value,
                consumed=self._quota.consumed,
                limit=self._quota.limit,
            )
            return self._record(CycleOutcome.QUOTA_BLOCKED)

        # STAGE-2: single-flight guard (atomic test-and-set)
        if not self._busy.acquire(blocking=False):
            logger.debug("Cycle already in flight, dropping request", stage=Stage.SINGLE_FLIGHT.value)
            return CycleOutcome.DROPPED

        cycle_id = str(uuid.uuid4())
        set_cycle_id(cycle_id)
        try:
            outcome = await self._run_cycle(capture_fn, local_process_fn, remote_analyze_fn, display_fn)
            return self._record(outcome)
        finally:
            self._busy.release()
            clear_cycle_id()

    async def _run_cycle(
        self,
        capture_fn: CaptureFn | None,
        local_process_fn: LocalProcessFn | None,
        remote_analyze_fn: RemoteAnalyzeFn | None,
        display_fn: DisplayFn | None,
    ) -> CycleOutcome:
        display_fn = display_fn or self._log_result

        # STAGE-3: local shortcut
        if local_process_fn is not None:
            try:
                handled, local_result = await _resolve(local_process_fn())
            except Exception as e:
                self._log_failure(Stage.LOCAL_PROCESSING, "Local processing failed", e)
                return CycleOutcome.CAPTURE_FAILED
            if handled:
                logger.info("Handled on device", stage=Stage.LOCAL_PROCESSING.value)
                if local_result is not None:
                    await self._display(display_fn, local_result)
                return CycleOutcome.LOCAL_HANDLED

        # STAGE-4: capture + fingerprint
        try:
            image_bytes = await self._capture(capture_fn)
        except Exception as e:
            self._log_failure(Stage.CAPTURE, "Capture failed", e)
            return CycleOutcome.CAPTURE_FAILED
        if self._disposed:
            return self._abandon("capture")
        fingerprint = self._cache.fingerprint(image_bytes)

        # STAGE-5: cache lookup
        cached = self._cache.get(fingerprint)
        if cached is not None:
            logger.info(
                "Cache hit",
                stage=Stage.CACHE_LOOKUP.value,
                fingerprint=fingerprint.hex()[:16],
            )
            await self._display(display_fn, cached)
            return CycleOutcome.CACHE_HIT

        # STAGE-6: billed remote call
        if not self._quota.try_consume():
            # Benign race with the pre-check (e.g. a period boundary or a shared tracker)
            logger.warning("Quota exhausted before remote call", stage=Stage.QUOTA_CHECK.value)
            return CycleOutcome.QUOTA_BLOCKED

        analyze = remote_analyze_fn or self._provider.analyze
        logger.info(
            "Cache miss, calling remote service",
            stage=Stage.REMOTE_ANALYSIS.value,
            fingerprint=fingerprint.hex()[:16],
            image_size=len(image_bytes),
            quota_remaining=self._quota.remaining(),
        )

        async def remote_call() -> DetectionResult:
            return _to_detection_result(await _resolve(analyze(image_bytes)))

        call = await self._executor.execute(remote_call, self._policy)
        if not call.ok:
            self._log_failure(
                Stage.REMOTE_ANALYSIS,
                "Remote analysis failed",
                call.error,
                attempts=call.attempts,
                error_kind=call.kind.value,
            )
            return CycleOutcome.REMOTE_FAILED

        if self._disposed:
            return self._abandon("remote analysis")

        result: DetectionResult = call.value
        self._cache.put(fingerprint, result)
        await self._display(display_fn, result)

        logger.info(
            "Remote analysis succeeded",
            stage=Stage.REMOTE_ANALYSIS.value,
            attempts=call.attempts,
            detections=len(result.detections),
        )
        return CycleOutcome.REMOTE_SUCCEEDED

    async def _capture(self, capture_fn: CaptureFn | None) -> bytes:
        if capture_fn is None:
            if self._capture_source is None:
                raise CaptureError("No capture function given and no capture source attached")
            capture_fn = self._capture_source.capture

        outcome = capture_fn()
        if inspect.isawaitable(outcome):
            if self._capture_timeout is not None:
                try:
                    outcome = await asyncio.wait_for(outcome, timeout=self._capture_timeout)
                except asyncio.TimeoutError as e:
                    raise CaptureError.from_exception(
                        e, message="Capture timed out", timeout=self._capture_timeout
                    )
            else:
                outcome = await outcome

        if not isinstance(outcome, (bytes, bytearray, memoryview)) or len(outcome) == 0:
            raise CaptureError(
                "Capture produced no image bytes",
                details={"result_type": type(outcome).__name__},
            )
        return bytes(outcome)

    async def _display(self, display_fn: DisplayFn, result: DetectionResult) -> None:
        try:
            await _resolve(display_fn(result))
        except Exception as e:
            self._log_failure(Stage.DISPLAY, "Display sink failed", e)

    def _abandon(self, after: str) -> CycleOutcome:
        logger.warning(
            "Gateway closed during cycle, result discarded",
            stage=Stage.CLEANUP.value,
            after=after,
        )
        return CycleOutcome.ABANDONED

    def _log_result(self, result: DetectionResult) -> None:
        logger.info(
            "Detections",
            stage=Stage.DISPLAY.value,
            labels=result.labels,
            tags=[tag.name for tag in result.tags],
        )

    def _log_failure(self, stage: Stage, message: str, error: BaseException, **context) -> None:
        error_info = (
            error.to_dict()
            if isinstance(error, VisionGatewayError)
            else {"error_type": type(error).__name__, "message": str(error)}
        )
        logger.error(message, stage=stage.value, **error_info, **context)

    def _record(self, outcome: CycleOutcome) -> CycleOutcome:
        self._last_outcome = outcome
        self._outcomes[outcome] += 1
        return outcome

    def _ensure_open(self) -> None:
        if self._disposed:
            raise DisposedError("RequestGateway has been closed")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """
        Release the remote client and capture resource, clear the cache and
        mark the gateway disposed. Safe to call more than once.

        Does not wait for a cycle in flight; that cycle ends ABANDONED and
        neither caches nor displays its result.
        """
        if self._disposed:
            return
        self._disposed = True

        if self._capture_source is not None:
            try:
                await _resolve(self._capture_source.close())
            except Exception as e:
                self._log_failure(Stage.CLEANUP, "Failed to release capture source", e)
            self._capture_source = None

        try:
            await self._provider.close()
        except Exception as e:
            self._log_failure(Stage.CLEANUP, "Failed to close provider", e)

        self._cache.clear()
        logger.info("Gateway closed", stage=Stage.CLEANUP.value, outcomes=self._outcome_counts())

    async def __aenter__(self) -> "RequestGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _outcome_counts(self) -> dict[str, int]:
        return {outcome.value: count for outcome, count in self._outcomes.items()}

    def stats(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "last_outcome": self._last_outcome.value if self._last_outcome else None,
            "outcomes": self._outcome_counts(),
            "quota": self._quota.stats(),
            "cache": self._cache.stats(),
            "provider": self._provider.get_stats(),
        }
