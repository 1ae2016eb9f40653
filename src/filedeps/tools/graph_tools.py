"""MCP tools for dependency graph queries."""

from pathlib import Path
from typing import Any

from fastmcp import Context

from ..graph import (
    DependencyIndexer,
    canonical_path,
    find_dependency_chain,
    get_file_cycles,
    get_file_dependencies,
    get_file_dependents,
    get_project_cycles,
)


def resolve_project_path(indexer: DependencyIndexer, path: str) -> str | None:
    """Resolve a tool path argument (absolute or project-relative).

    Returns:
        Canonical absolute path, or None if it lies outside the project
    """
    resolved = Path(canonical_path(indexer.project_root / path))
    if resolved != indexer.project_root and indexer.project_root not in resolved.parents:
        return None
    return str(resolved)


def _outside_project(path: str) -> dict[str, Any]:
    return {"error": f"Path is outside the project: {path}", "path": path}


def register_graph_tools(mcp) -> None:
    """Register graph tools with the MCP server.

    Args:
        mcp: FastMCP server instance
    """

    @mcp.tool()
    def get_outgoing_dependencies(ctx: Context, file_path: str) -> dict[str, Any]:
        """Get the project files a file imports.

        Args:
            file_path: File path (absolute or relative to the project root)

        Returns:
            Imported files sorted by path
        """
        indexer: DependencyIndexer = ctx.request_context.lifespan_context["indexer"]
        resolved = resolve_project_path(indexer, file_path)
        if resolved is None:
            return _outside_project(file_path)

        dependencies = get_file_dependencies(indexer, resolved)
        return {
            "file_path": resolved,
            "dependencies": dependencies,
            "count": len(dependencies),
        }

    @mcp.tool()
    def get_incoming_dependencies(ctx: Context, file_path: str) -> dict[str, Any]:
        """Get the project files that import a file.

        Args:
            file_path: File path (absolute or relative to the project root)

        Returns:
            Importing files sorted by path
        """
        indexer: DependencyIndexer = ctx.request_context.lifespan_context["indexer"]
        resolved = resolve_project_path(indexer, file_path)
        if resolved is None:
            return _outside_project(file_path)

        dependents = get_file_dependents(indexer, resolved)
        return {
            "file_path": resolved,
            "dependents": dependents,
            "count": len(dependents),
        }

    @mcp.tool()
    def get_circular_dependencies(ctx: Context, file_path: str) -> dict[str, Any]:
        """Get the import cycles that pass through a file.

        Args:
            file_path: File path (absolute or relative to the project root)

        Returns:
            Cycles as lists of project-relative paths
        """
        indexer: DependencyIndexer = ctx.request_context.lifespan_context["indexer"]
        resolved = resolve_project_path(indexer, file_path)
        if resolved is None:
            return _outside_project(file_path)

        cycles = get_file_cycles(indexer, resolved)
        return {
            "file_path": resolved,
            "cycles": cycles,
            "count": len(cycles),
        }

    @mcp.tool()
    def get_all_circular_dependencies(ctx: Context) -> dict[str, Any]:
        """Get every import cycle in the project grouped by severity.

        Returns:
            Cycles under "critical", "moderate" and "low", most severe first
        """
        indexer: DependencyIndexer = ctx.request_context.lifespan_context["indexer"]
        return get_project_cycles(indexer)

    @mcp.tool()
    def get_dependency_chain(ctx: Context, source_path: str, target_path: str) -> dict[str, Any]:
        """Get the shortest import chain from one file to another.

        Args:
            source_path: File the chain starts at
            target_path: File the chain should reach

        Returns:
            Files along the chain (empty if the target is unreachable)
        """
        indexer: DependencyIndexer = ctx.request_context.lifespan_context["indexer"]
        source = resolve_project_path(indexer, source_path)
        target = resolve_project_path(indexer, target_path)
        if source is None:
            return _outside_project(source_path)
        if target is None:
            return _outside_project(target_path)

        chain = find_dependency_chain(indexer, source, target)
        return {
            "source": source,
            "target": target,
            "chain": chain,
            "length": max(len(chain) - 1, 0),
        }
