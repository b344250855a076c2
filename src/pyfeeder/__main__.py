"""Run the feeder bot: webhook server plus change monitor.

Usage::

    python -m pyfeeder --env-file .env --port 8080
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from aiohttp import web

from pyfeeder.config import FeederConfig
from pyfeeder.exceptions import FeederConfigError
from pyfeeder.service import FeederService

_logger = logging.getLogger("pyfeeder")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pyfeeder", description="Chat-controlled feeder bot.")
    parser.add_argument("--env-file", default=None, help="dotenv file to load (default: ./.env)")
    parser.add_argument("--host", default=None, help="interface to bind (overrides FEEDER_HOST)")
    parser.add_argument("--port", type=int, default=None, help="port to listen on (overrides FEEDER_PORT)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="root log level",
    )
    return parser.parse_args(argv)


async def _serve(config: FeederConfig) -> None:
    async with FeederService(config) as service:
        runner = web.AppRunner(service.build_app())
        await runner.setup()
        site = web.TCPSite(runner, config.host, config.port)
        await site.start()
        _logger.info("Starting server at %s:%s%s", config.host, config.port, config.webhook_path)
        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port

    try:
        config = FeederConfig.from_env(args.env_file, **overrides)
    except FeederConfigError as exc:
        _logger.error("Invalid configuration: %s", exc)
        return 2

    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        _logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
