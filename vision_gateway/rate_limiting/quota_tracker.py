"""
Quota Tracker

Counts billed remote calls against a fixed per-period limit.

Algorithm:
1. Apply the rollover policy (no-op for QuotaPeriod.NONE)
2. If consumed < limit: increment and allow
3. Otherwise: refuse, with no side effect

Rationale: The remote service has a free tier (5000 transactions); going
over it costs money, so the tracker refuses rather than counts past the
limit. ``consumed`` only ever grows unless a rollover policy is configured
explicitly.

Thread safety: none. The gateway serializes access through its single-flight
guard.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from vision_gateway.core.config.constants import DEFAULT_QUOTA_LIMIT, QuotaPeriod, Stage
from vision_gateway.core.logging.logger import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def period_start_for(moment: datetime, period: QuotaPeriod, current_start: datetime) -> datetime:
    """
    Start of the quota period containing ``moment``.

    For QuotaPeriod.NONE the period never ends, so ``current_start`` is kept.
    """
    if period is QuotaPeriod.MONTHLY:
        return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return current_start


@dataclass(frozen=True)
class QuotaState:
    """Immutable snapshot of the tracker."""

    consumed: int
    limit: int
    period_start: datetime
    period: QuotaPeriod = QuotaPeriod.NONE

    @property
    def remaining(self) -> int:
        return max(self.limit - self.consumed, 0)

    @property
    def exhausted(self) -> bool:
        return self.consumed >= self.limit


class QuotaTracker:
    """
    Per-period call counter.

    Usage:
        quota = QuotaTracker(limit=5000)
        if quota.try_consume():
            await call_remote_service()
    """

    def __init__(
        self,
        limit: int = DEFAULT_QUOTA_LIMIT,
        period: QuotaPeriod = QuotaPeriod.NONE,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if limit < 0:
            raise ValueError("limit must be >= 0")
        self._limit = limit
        self._period = QuotaPeriod(period)
        self._clock = clock
        self._consumed = 0
        now = clock()
        self._period_start = period_start_for(now, self._period, now)

    @classmethod
    def from_settings(cls, settings, clock: Callable[[], datetime] = _utcnow) -> "QuotaTracker":
        return cls(
            limit=settings.quota.QUOTA_LIMIT,
            period=settings.quota.QUOTA_PERIOD,
            clock=clock,
        )

    def _maybe_roll_over(self) -> None:
        new_start = period_start_for(self._clock(), self._period, self._period_start)
        if new_start > self._period_start:
            logger.info(
                "Quota period rolled over",
                stage=Stage.QUOTA.value,
                previous_start=self._period_start.isoformat(),
                consumed=self._consumed,
                limit=self._limit,
            )
            self._period_start = new_start
            self._consumed = 0

    def try_consume(self) -> bool:
        """
        Consume one call if any remain.

        Returns:
            True (and consumed += 1) iff consumed < limit, else False
        """
        self._maybe_roll_over()
        if self._consumed >= self._limit:
            return False
        self._consumed += 1
        return True

    def remaining(self) -> int:
        self._maybe_roll_over()
        return self._limit - self._consumed

    @property
    def consumed(self) -> int:
        return self._consumed

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def period_start(self) -> datetime:
        return self._period_start

    def snapshot(self) -> QuotaState:
        self._maybe_roll_over()
        return QuotaState(
            consumed=self._consumed,
            limit=self._limit,
            period_start=self._period_start,
            period=self._period,
        )

    def stats(self) -> dict[str, Any]:
        state = self.snapshot()
        return {
            "consumed": state.consumed,
            "limit": state.limit,
            "remaining": state.remaining,
            "period": state.period.value,
            "period_start": state.period_start.isoformat(),
        }
