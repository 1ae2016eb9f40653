"""FastMCP server for filedeps - file dependency graph and cycle detection."""

import logging
import threading
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from .config import Settings, setup_logging
from .graph import DependencyIndexer
from .tools import register_all_tools

logger = logging.getLogger(__name__)


def run_initial_indexing(indexer: DependencyIndexer, context: dict[str, Any]) -> None:
    """Run initial indexing in a background thread.

    Args:
        indexer: DependencyIndexer instance
        context: Server context dict to record indexing errors
    """
    try:
        logger.info("Starting background indexing...")
        indexer.index_workspace()
        logger.info("Background indexing completed successfully")
    except Exception as e:
        logger.error(f"Background indexing failed: {e}")
        context["indexing_error"] = str(e)


@asynccontextmanager
async def lifespan(server: FastMCP):
    """Manage server lifecycle - initialize and cleanup resources."""
    try:
        config = Settings()
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise

    setup_logging(config.log_level)
    logger.info(f"Starting filedeps for project: {config.repo_path}")

    indexer = DependencyIndexer(
        config.repo_path,
        policy=config.severity_policy,
        extensions=config.extensions,
    )

    # Context is built before indexing so the MCP handshake completes quickly
    context: dict[str, Any] = {
        "config": config,
        "indexer": indexer,
        "indexing_error": None,
    }

    if config.index_on_startup:
        indexing_thread = threading.Thread(
            target=run_initial_indexing,
            args=(indexer, context),
            daemon=True,
        )
        indexing_thread.start()

    logger.info("filedeps ready (indexing in background)")

    yield context

    logger.info("Shutdown complete")


# Create the MCP server
mcp = FastMCP("filedeps", lifespan=lifespan)

# Register all tools
register_all_tools(mcp)


def main():
    """Entry point for the filedeps MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
