"""Main entry point for the IPTV catalog MCP server."""

import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from config import build_auth_settings, load_config, load_secrets
from mcp_server.server import create_server
from persistence import close_database, get_database

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout carries the MCP stdio transport."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


async def main(config_dir: str | None = None) -> None:
    """Main entry point."""
    cfg_path = Path(config_dir) if config_dir else None

    # Load configuration
    try:
        config = load_config(cfg_path)
        secrets = load_secrets(cfg_path)
    except (ValidationError, ValueError, OSError) as e:
        configure_logging()
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    configure_logging(config.service.log_level)
    logger.info(f"Starting {config.service.name} MCP server...")

    # Token settings are validated once, here
    try:
        auth_settings = build_auth_settings(config, secrets)
    except ValidationError as e:
        logger.error(f"Invalid JWT settings: {e}")
        logger.error("Run 'iptv config init' to generate a secret key")
        sys.exit(1)

    database = await get_database(config.database.path)
    server = create_server(config, auth_settings, database)

    try:
        logger.info("MCP server running...")
        await server.run()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        await close_database()
        logger.info("Shutdown complete")


def run() -> None:
    """Synchronous entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
