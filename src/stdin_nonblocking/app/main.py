"""Main entry point — ``python3 -m stdin_nonblocking.app.main``.

Usage::

    echo "hello" | stdin-nonblocking
    printf '\\xde\\xad\\xbe\\xef' | stdin-nonblocking --mode blocking
    cat big.log | stdin-nonblocking --mode async
    stdin-nonblocking --mode poll --fallback "nothing piped"

Payload bytes go to stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from typing import BinaryIO

from stdin_nonblocking.app.bootstrap import create_gateway, load_settings
from stdin_nonblocking.app.settings import StdinSettings
from stdin_nonblocking.application.async_bridge import AsyncStdinStream
from stdin_nonblocking.application.stdin_gateway import StdinGateway
from stdin_nonblocking.domain.enums import ReadMode
from stdin_nonblocking.domain.errors import StdinError

logger = logging.getLogger(__name__)

MODES = ("bounded", "blocking", "poll", "async")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stdin-nonblocking",
        description="Read piped stdin without ever blocking on an interactive terminal.",
    )
    parser.add_argument("--mode", choices=MODES, default="bounded", help="Access pattern (default: bounded)")
    parser.add_argument("--fallback", default=None, help="Value written when no input is available")
    parser.add_argument("--delay", type=float, default=None, help="Bounded-wait settle delay in seconds")
    parser.add_argument("--poll-interval", type=float, default=None, help="Sleep between polls in poll mode")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    return parser


def run_bounded(gateway: StdinGateway, fallback: bytes, out: BinaryIO) -> None:
    """Write whatever arrived within the settle delay, or the fallback."""
    out.write(gateway.read_bytes_or_default(fallback) or b"")


def run_blocking(gateway: StdinGateway, fallback: bytes, out: BinaryIO) -> None:
    """Write all redirected input once it has been read, or the fallback."""
    out.write(gateway.read_bytes_blocking_or_default(fallback) or b"")


def run_poll(gateway: StdinGateway, fallback: bytes, out: BinaryIO, interval: float) -> int:
    """Poll a text stream with ``try_next`` until it closes. Returns the line count."""
    received = 0
    with gateway.stream(ReadMode.TEXT) as stream:
        while True:
            line = stream.try_next()
            if line is not None:
                received += 1
                out.write(f"Received: {line}\n".encode())
                out.flush()
                continue
            if stream.closed:
                break
            time.sleep(interval)

    if not received:
        out.write(fallback)
    return received


async def run_async(gateway: StdinGateway, fallback: bytes, out: BinaryIO, maxsize: int) -> int:
    """Stream binary chunks through the event loop as they arrive. Returns the chunk count."""
    received = 0
    async with AsyncStdinStream(gateway.stream(ReadMode.BINARY), maxsize=maxsize) as reader:
        async for chunk in reader:
            received += 1
            out.write(chunk)  # type: ignore[arg-type]
            out.flush()

    if not received:
        out.write(fallback)
    return received


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _settings_from_args(args: argparse.Namespace) -> StdinSettings:
    overrides: dict[str, object] = {}
    if args.fallback is not None:
        overrides["fallback"] = args.fallback
    if args.delay is not None:
        overrides["settle_delay_seconds"] = args.delay
    if args.poll_interval is not None:
        overrides["poll_interval_seconds"] = args.poll_interval
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return load_settings(**overrides)


def main(argv: list[str] | None = None) -> int:
    """Synchronous entry point for the console script."""
    args = build_parser().parse_args(argv)

    try:
        settings = _settings_from_args(args)
        _configure_logging(settings.log_level)
        gateway = create_gateway(settings)
    except StdinError as exc:
        print(f"stdin-nonblocking: {exc.message}", file=sys.stderr)
        return 2

    out = sys.stdout.buffer
    fallback = settings.fallback.encode()
    logger.debug("Running in %s mode", args.mode)

    try:
        if args.mode == "bounded":
            run_bounded(gateway, fallback, out)
        elif args.mode == "blocking":
            run_blocking(gateway, fallback, out)
        elif args.mode == "poll":
            run_poll(gateway, fallback, out, settings.poll_interval_seconds)
        else:
            asyncio.run(run_async(gateway, fallback, out, settings.async_buffer_size))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    finally:
        out.flush()

    return 0


if __name__ == "__main__":
    sys.exit(main())
