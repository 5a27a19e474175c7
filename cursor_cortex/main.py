"""
Main entry point for Cursor-Cortex MCP Server.

This module provides the main() function and server initialization.
"""

import asyncio

from mcp.server.stdio import stdio_server

from .config import STORAGE_DIRS, settings
from .logging import configure_logging, get_logger
from .tools import server

logger = get_logger(__name__)


def ensure_storage_dirs() -> None:
    """Create the storage root and its subdirectories."""
    for name in STORAGE_DIRS:
        (settings.storage_root / name).mkdir(parents=True, exist_ok=True)


def main():
    """Main entry point."""
    configure_logging()
    try:
        ensure_storage_dirs()
        logger.info("storage_ready", root=str(settings.storage_root))
    except OSError as e:
        logger.error("storage_setup_failed", root=str(settings.storage_root), error=str(e))

    async def run():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())

    asyncio.run(run())


if __name__ == "__main__":
    main()
