"""
Vision Session

Startup and shutdown around one RequestGateway, the way the headset app
runs it:

    start()
      1. build the gateway            (ConfigurationError propagates)
      2. probe the remote service     (3 attempts, 1s / 2s backoff)
      3. reachable?  open the capture source and attach it to the gateway
         otherwise   stay DEGRADED: no capture, analyze() is a no-op

A failed probe never raises; it is recorded on ``degraded_reason``.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from vision_gateway.core.config.constants import CycleOutcome, Stage
from vision_gateway.core.config.settings import Settings, get_settings
from vision_gateway.core.exceptions import ConnectivityError
from vision_gateway.core.logging.logger import get_logger
from vision_gateway.core.resilience.connectivity_probe import ConnectivityProbe
from vision_gateway.vision.capture import CaptureSource
from vision_gateway.vision.services.request_gateway import (
    DisplayFn,
    LocalProcessFn,
    RequestGateway,
)

logger = get_logger(__name__)


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    READY = "ready"
    DEGRADED = "degraded"
    CLOSED = "closed"


class VisionSession:
    """
    Owns a gateway, its connectivity probe and its capture source.

    Args:
        capture_factory: Opens the capture source; only called after a successful probe
        settings: Application settings
        gateway_factory: Builds the gateway (default: ``RequestGateway(settings)``)
        probe: Connectivity probe (default: fixed 3-attempt policy)
        local_process_fn: Optional on-device shortcut passed to every cycle
        display_fn: Rendering sink passed to every cycle
    """

    def __init__(
        self,
        capture_factory: Callable[[], CaptureSource],
        settings: Settings | None = None,
        gateway_factory: Callable[[Settings], RequestGateway] | None = None,
        probe: ConnectivityProbe | None = None,
        local_process_fn: LocalProcessFn | None = None,
        display_fn: DisplayFn | None = None,
    ):
        self.settings = settings or get_settings()
        self._capture_factory = capture_factory
        self._gateway_factory = gateway_factory or RequestGateway
        self._probe = probe if probe is not None else ConnectivityProbe()
        self._local_process_fn = local_process_fn
        self._display_fn = display_fn

        self.gateway: RequestGateway | None = None
        self.capture: CaptureSource | None = None
        self.status = SessionStatus.NOT_STARTED
        self.degraded_reason: ConnectivityError | None = None

    @property
    def ready(self) -> bool:
        return self.status is SessionStatus.READY

    async def start(self) -> SessionStatus:
        """
        Build the gateway, probe connectivity and initialize capture.

        Raises:
            ConfigurationError: If credentials are missing
        """
        if self.status is not SessionStatus.NOT_STARTED:
            return self.status

        self.gateway = self._gateway_factory(self.settings)

        if not await self._probe.check(self.gateway.provider.health_check):
            self.degraded_reason = self._probe.last_error
            self.status = SessionStatus.DEGRADED
            logger.error(
                "Remote service unreachable, capture disabled",
                stage=Stage.SESSION.value,
                **(self.degraded_reason.to_dict() if self.degraded_reason else {}),
            )
            return self.status

        self.capture = self._capture_factory()
        self.gateway.attach_capture(self.capture)
        self.status = SessionStatus.READY
        logger.info("Session ready", stage=Stage.SESSION.value)
        return self.status

    async def analyze(self) -> CycleOutcome | None:
        """
        Run one gateway cycle with the attached capture source.

        Returns None when the session is not ready (degraded or never started).
        """
        if not self.ready:
            logger.warning("Session not ready, skipping analysis", stage=Stage.SESSION.value, status=self.status.value)
            return None
        return await self.gateway.process(
            local_process_fn=self._local_process_fn,
            display_fn=self._display_fn,
        )

    async def close(self) -> None:
        if self.status is SessionStatus.CLOSED:
            return
        if self.gateway is not None:
            await self.gateway.close()
        elif self.capture is not None:
            await self.capture.close()
        self.status = SessionStatus.CLOSED
        logger.info("Session closed", stage=Stage.SESSION.value)

    async def __aenter__(self) -> "VisionSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def stats(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "degraded_reason": self.degraded_reason.message if self.degraded_reason else None,
            "gateway": self.gateway.stats() if self.gateway else None,
        }
