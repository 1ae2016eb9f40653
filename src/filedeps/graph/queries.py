"""Query functions returning plain dictionaries for front ends."""

import logging
import os
from typing import Any

from .builder import DependencyIndexer
from .models import CycleInfo

logger = logging.getLogger(__name__)


def _relative(indexer: DependencyIndexer, file_path: str) -> str:
    """Express a file path relative to the project root when it lies inside it."""
    try:
        return os.path.relpath(file_path, indexer.project_root)
    except ValueError:
        return file_path


def _file_entry(indexer: DependencyIndexer, file_path: str) -> dict[str, Any]:
    return {
        "file_path": file_path,
        "relative_path": _relative(indexer, file_path),
        "name": os.path.basename(file_path),
    }


def get_file_dependencies(indexer: DependencyIndexer, file_path: str) -> list[dict[str, Any]]:
    """Get all files that a file imports.

    Args:
        indexer: Dependency indexer
        file_path: File to query

    Returns:
        Imported file details, sorted by path
    """
    return [_file_entry(indexer, p) for p in indexer.outgoing(file_path)]


def get_file_dependents(indexer: DependencyIndexer, file_path: str) -> list[dict[str, Any]]:
    """Get all files that import a given file.

    Args:
        indexer: Dependency indexer
        file_path: File to query

    Returns:
        Importing file details, sorted by path
    """
    return [_file_entry(indexer, p) for p in indexer.incoming(file_path)]


def get_file_cycles(indexer: DependencyIndexer, file_path: str) -> list[list[str]]:
    """Get the cycles involving a file, with project-relative paths."""
    return [
        [_relative(indexer, p) for p in cycle]
        for cycle in indexer.find_cycles_through(file_path)
    ]


def _cycle_entry(indexer: DependencyIndexer, cycle: CycleInfo) -> dict[str, Any]:
    return {
        "files": [_relative(indexer, p) for p in cycle.files],
        "severity": cycle.severity.value,
        "score": round(cycle.score, 4),
        "dependent_count": cycle.dependent_count,
    }


def get_project_cycles(indexer: DependencyIndexer) -> dict[str, Any]:
    """Get every project cycle grouped by severity.

    Returns:
        Dictionary with a ``total`` count and one list per severity level
    """
    groups = indexer.cycles_by_severity()
    result: dict[str, Any] = {
        "total": sum(len(cycles) for cycles in groups.values()),
    }
    for severity, cycles in groups.items():
        result[severity.value] = [_cycle_entry(indexer, c) for c in cycles]
    return result


def find_dependency_chain(
    indexer: DependencyIndexer, source_path: str, target_path: str
) -> list[str]:
    """Find the shortest import chain from one file to another.

    Args:
        indexer: Dependency indexer
        source_path: Importing file the chain starts at
        target_path: File the chain should reach

    Returns:
        Files along the chain (both ends included), empty if unreachable
    """
    return indexer.dependency_chain(source_path, target_path)
