"""Command-line entry point: ``flux-image-server`` or ``python -m fluximageserver``."""

import asyncio
import logging
import os
import sys

from fluximageserver.config import ReplicateConfig
from fluximageserver.models.errors import ConfigurationError
from fluximageserver.server import FluxImageServer

logger = logging.getLogger("fluximageserver")


def resolve_log_level(raw: str | None) -> str:
    """Return a known logging level name, defaulting to INFO."""
    level = (raw or "INFO").strip().upper()
    if isinstance(logging.getLevelName(level), int):
        return level
    return "INFO"


def configure_logging() -> None:
    """Send logs to stderr; stdout carries the MCP protocol."""
    raw_level = os.getenv("LOG_LEVEL")
    level = resolve_log_level(raw_level)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if raw_level and raw_level.strip().upper() != level:
        logger.warning(f"⚠️ Unknown LOG_LEVEL {raw_level!r}, using {level}")


def main() -> None:
    configure_logging()

    try:
        config = ReplicateConfig.from_env()
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    server = FluxImageServer(config)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("👋 Interrupted")
    sys.exit(0)


if __name__ == "__main__":
    main()
