"""Probe the configured database and exit 0 (reachable) or 1 (unreachable).

Usage::

    DATABASE_URL=postgresql://app@db.internal/app python -m pgpulse
"""

from __future__ import annotations

import asyncio
import signal
import sys

from .config.settings import DatabaseSettings
from .core.exceptions import MissingDatabaseUrlError
from .database import Database
from .logger import configure_logging

EXIT_UNREACHABLE = 1
EXIT_MISCONFIGURED = 2

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def amain(settings: DatabaseSettings) -> int:
    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in _SHUTDOWN_SIGNALS:
        loop.add_signal_handler(sig, shutdown.set)

    try:
        async with Database.from_settings(settings) as db:
            reachable = await db.atest_connection(settings.to_probe_config(), shutdown=shutdown)
    finally:
        for sig in _SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(sig)

    return 0 if reachable else EXIT_UNREACHABLE


def main() -> int:
    logger = configure_logging()
    settings = DatabaseSettings()

    try:
        settings.require_url()
    except MissingDatabaseUrlError as e:
        logger.critical("Refusing to start", error=str(e))
        return EXIT_MISCONFIGURED

    return asyncio.run(amain(settings))


if __name__ == "__main__":
    sys.exit(main())
