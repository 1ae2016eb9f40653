"""MCP tools for index management operations."""

import logging
from typing import Any

from fastmcp import Context

from ..graph import DependencyIndexer
from .graph_tools import resolve_project_path

logger = logging.getLogger(__name__)


def register_service_tools(mcp) -> None:
    """Register service tools with the MCP server.

    Args:
        mcp: FastMCP server instance
    """

    @mcp.tool()
    def get_index_status(ctx: Context) -> dict[str, Any]:
        """Get the current status of the dependency index.

        Returns:
            Index statistics and status information
        """
        context = ctx.request_context.lifespan_context
        indexer: DependencyIndexer = context["indexer"]
        indexing_error = context.get("indexing_error")

        if indexing_error:
            status = "error"
        elif indexer.is_indexing:
            status = "indexing"
        else:
            status = "ready"

        result: dict[str, Any] = {
            "status": status,
            "project_root": str(indexer.project_root),
            "graph": indexer.get_statistics(),
        }
        if indexing_error:
            result["error"] = indexing_error
        return result

    @mcp.tool()
    def reindex(ctx: Context, path: str | None = None) -> dict[str, Any]:
        """Reindex the project or a single file.

        Safe to call at any time: a full reindex requested while another
        one is running is skipped.

        Args:
            path: Optional file to reindex (relative to the project root).
                  If not provided, the whole project is reindexed.

        Returns:
            Reindexing result with graph statistics
        """
        indexer: DependencyIndexer = ctx.request_context.lifespan_context["indexer"]

        if path is None:
            logger.info("Reindexing project")
            rebuilt = indexer.index_workspace()
            return {
                "path": str(indexer.project_root),
                "reindexed": rebuilt,
                "skipped": not rebuilt,
                "graph": indexer.get_statistics(),
            }

        resolved = resolve_project_path(indexer, path)
        if resolved is None:
            return {"error": f"Path is outside the project: {path}", "path": path}

        logger.info(f"Reindexing {resolved}")
        indexed = indexer.index_file(resolved)
        if not indexed:
            indexer.remove_file(resolved)

        return {
            "path": resolved,
            "reindexed": indexed,
            "removed": not indexed,
            "graph": indexer.get_statistics(),
        }
