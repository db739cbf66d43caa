from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from hb_notifier.domain.exceptions import DeliveryError, HoneybadgerError
from hb_notifier.infrastructure.config import ConfigBuilder, get_settings
from hb_notifier.services.notifier import Honeybadger

logger = logging.getLogger(__name__)


class SampleError(Exception):
    """Raised on purpose so the test notice carries a real traceback."""


def _parse_context(pairs: Sequence[str]) -> dict[str, str]:
    context: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {pair!r}")
        context[key] = value
    return context


def _sample_error(message: str) -> SampleError:
    try:
        try:
            raise RuntimeError("hb-notify test cause")
        except RuntimeError as cause:
            raise SampleError(message) from cause
    except SampleError as exc:
        return exc


async def _send(notifier: Honeybadger, message: str, context: dict[str, str] | None) -> None:
    async with notifier:
        await notifier.notify(_sample_error(message), context)


def main(argv: Sequence[str] | None = None) -> int:
    """Send a test notice to Honeybadger and report the outcome."""
    parser = argparse.ArgumentParser(
        prog="hb-notify", description="Send a test notice to Honeybadger."
    )
    parser.add_argument("message", help="message of the test error")
    parser.add_argument("--env", help="environment name (overrides ENV)")
    parser.add_argument(
        "--context",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="context annotation, may be repeated",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if settings.api_key is None:
        parser.error("HONEYBADGER_API_KEY is not set")
    try:
        context = _parse_context(args.context) or None
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    builder = ConfigBuilder(settings.api_key.get_secret_value(), settings=settings)
    if args.env:
        builder = builder.with_env(args.env)

    try:
        notifier = Honeybadger(builder.build())
        asyncio.run(_send(notifier, args.message, context))
    except DeliveryError as exc:
        logger.error("Notice was not delivered (%s): %s", exc.outcome.kind.value, exc)
        return 1
    except HoneybadgerError as exc:
        logger.error("Could not send notice: %s", exc)
        return 1

    print("Notice delivered.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
