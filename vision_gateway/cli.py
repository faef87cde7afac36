#!/usr/bin/env python3
"""
Command-line entry point.

Usage:
    vision-gateway probe
    vision-gateway analyze photo.jpg [--repeat 2] [--fake]

Credentials come from the environment / .env (AZURE_VISION_API_KEY,
AZURE_VISION_ENDPOINT). ``--fake`` swaps in the offline provider.
"""

import argparse
import asyncio
import sys

import orjson

from vision_gateway.core.config.settings import get_settings
from vision_gateway.core.exceptions import ConfigurationError
from vision_gateway.core.logging.logger import get_logger, setup_logging
from vision_gateway.core.resilience.connectivity_probe import ConnectivityProbe
from vision_gateway.vision.capture import FileCaptureSource
from vision_gateway.vision.models.detection import DetectionResult
from vision_gateway.vision.providers.azure_provider import AzureVisionProvider
from vision_gateway.vision.providers.base_provider import ProviderConfig
from vision_gateway.vision.providers.fake_provider import FakeVisionProvider
from vision_gateway.vision.services.request_gateway import RequestGateway
from vision_gateway.vision.services.vision_session import SessionStatus, VisionSession

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vision-gateway", description=__doc__.splitlines()[1])
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--log-format", choices=["json", "console"], default=None)

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("probe", help="Check that the remote service is reachable")

    analyze = subparsers.add_parser("analyze", help="Analyze an image file")
    analyze.add_argument("image", help="Path to a JPEG/PNG image")
    analyze.add_argument("--repeat", type=int, default=1, help="Number of cycles to run (default: 1)")
    analyze.add_argument("--fake", action="store_true", help="Use the offline fake provider")
    return parser


def _print_result(result: DetectionResult) -> None:
    sys.stdout.write(orjson.dumps(result.to_dict(), option=orjson.OPT_INDENT_2).decode() + "\n")


async def run_probe(settings) -> int:
    provider = AzureVisionProvider(ProviderConfig.from_settings(settings))
    try:
        ok = await ConnectivityProbe().check(provider.health_check)
    finally:
        await provider.close()
    print("reachable" if ok else "unreachable")
    return 0 if ok else 1


async def run_analyze(settings, image: str, repeat: int, fake: bool) -> int:
    def gateway_factory(s):
        return RequestGateway(s, provider=FakeVisionProvider() if fake else None)

    session = VisionSession(
        capture_factory=lambda: FileCaptureSource(image),
        settings=settings,
        gateway_factory=gateway_factory,
        display_fn=_print_result,
    )
    async with session:
        if session.status is not SessionStatus.READY:
            print(f"session degraded: {session.degraded_reason}", file=sys.stderr)
            return 1
        for _ in range(max(repeat, 1)):
            outcome = await session.analyze()
            print(f"outcome: {outcome.value}", file=sys.stderr)
        stats = session.stats()

    sys.stderr.write(orjson.dumps(stats["gateway"]["quota"]).decode() + "\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(log_level=args.log_level, log_format=args.log_format)
    settings = get_settings()

    try:
        if args.command == "probe":
            return asyncio.run(run_probe(settings))
        return asyncio.run(run_analyze(settings, args.image, args.repeat, args.fake))
    except ConfigurationError as e:
        print(f"configuration error: {e.message} {e.details}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\n[!] Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
