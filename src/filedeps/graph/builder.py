"""Dependency indexer: builds and maintains the file dependency graph."""

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

import networkx as nx

from ..parser.imports import ImportExtractor
from ..parser.languages import DEFAULT_EXTENSIONS, find_source_files, get_language_for_file
from .cycles import find_all_cycles, find_cycles_through, group_by_severity
from .import_resolver import ImportResolver, Reference, canonical_path
from .models import CycleInfo, CycleSeverity, SeverityPolicy
from .storage import DependencyGraph

logger = logging.getLogger(__name__)

FileSource = Callable[[], Iterable[str]]


class DependencyIndexer:
    """Builds and maintains the dependency graph for one project root.

    The indexer is the single owner of the graph. Graph writes and reads go
    through one re-entrant lock, so queries served while a background
    re-index runs see a partial but consistent graph. Whole-project
    re-indexing is additionally single-flight.
    """

    def __init__(
        self,
        project_root: Path | str,
        file_source: FileSource | None = None,
        policy: SeverityPolicy | None = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        """Initialize the indexer.

        Args:
            project_root: Root directory of the project
            file_source: Callable returning candidate files for a full
                         re-index (defaults to walking the project root)
            policy: Severity scoring policy for project-wide cycles
            extensions: Source extensions used by the default file source
        """
        self._project_root = Path(canonical_path(project_root))
        self._extensions = tuple(extensions)
        self._file_source = file_source or self._default_file_source
        self._policy = policy or SeverityPolicy()

        self._graph = DependencyGraph()
        self._resolver = ImportResolver(self._project_root, extensions=self._extensions)
        self._extractor = ImportExtractor()
        self._indexing_lock = threading.Lock()
        self._graph_lock = threading.RLock()

    @property
    def project_root(self) -> Path:
        """Root directory of the project."""
        return self._project_root

    @property
    def graph(self) -> DependencyGraph:
        """Access the underlying dependency graph.

        Reads through this property bypass the indexer lock; use the query
        methods while a background re-index may be running.
        """
        return self._graph

    @property
    def resolver(self) -> ImportResolver:
        """Access the import resolver (and its alias table)."""
        return self._resolver

    @property
    def extractor(self) -> ImportExtractor:
        """Access the import extractor."""
        return self._extractor

    @property
    def policy(self) -> SeverityPolicy:
        """Severity scoring policy used for project-wide cycles."""
        return self._policy

    @property
    def is_indexing(self) -> bool:
        """Check if a whole-project re-index is in progress."""
        return self._indexing_lock.locked()

    def _default_file_source(self) -> Iterable[str]:
        return find_source_files(self._project_root, self._extensions)

    def load_aliases(self) -> None:
        """Reload the alias table and share its patterns with the extractor."""
        table = self._resolver.load_aliases()
        self._extractor.set_alias_patterns(table.alias_patterns())

    def index_workspace(self) -> bool:
        """Rebuild the whole index from scratch.

        A call made while another re-index is running returns immediately
        without doing anything.

        Returns:
            True if the index was rebuilt, False if skipped
        """
        if not self._indexing_lock.acquire(blocking=False):
            logger.info("Indexing already in progress, skipping")
            return False

        try:
            self.load_aliases()
            with self._graph_lock:
                self._graph.clear()

            indexed = 0
            for file_path in self._file_source():
                if self.index_file(file_path):
                    indexed += 1

            stats = self.get_statistics()
            logger.info(
                f"Indexed {indexed} files: {stats['nodes']} nodes, {stats['edges']} edges"
            )
            return True
        finally:
            self._indexing_lock.release()

    def _read_references(self, file_path: str) -> set[str] | None:
        """Read a file and extract its local references (None if unreadable)."""
        try:
            content = Path(file_path).read_bytes()
        except OSError as e:
            logger.warning(f"Failed to read file {file_path}: {e}")
            return None

        language = get_language_for_file(file_path) or "typescript"
        return self._extractor.extract_local_references(content, language)

    def index_file(self, file_path: str | Path) -> bool:
        """Index (or re-index) a single file.

        The file's previous edges are replaced by the ones found now.
        Unresolvable references contribute no edge. An unreadable file is
        skipped and its existing edges are left untouched.

        Args:
            file_path: File to index

        Returns:
            True if the file was indexed, False if it could not be read
        """
        file_path = canonical_path(file_path)
        specifiers = self._read_references(file_path)
        if specifiers is None:
            return False

        targets: set[str] = set()
        for specifier in specifiers:
            resolved = self._resolver.resolve(specifier, file_path)
            if resolved:
                targets.add(resolved)
            else:
                logger.debug(f"Unresolved import {specifier!r} in {file_path}")

        with self._graph_lock:
            self._graph.set_dependencies(file_path, targets)
        logger.debug(f"Indexed {file_path}: {len(targets)} local dependencies")
        return True

    def remove_file(self, file_path: str | Path) -> bool:
        """Drop a deleted file's outgoing edges.

        Args:
            file_path: File that no longer exists

        Returns:
            True if the file was indexed
        """
        with self._graph_lock:
            removed = self._graph.remove_file(canonical_path(file_path))
        if removed:
            logger.debug(f"Removed {file_path} from index")
        return removed

    def references_for_file(self, file_path: str | Path) -> list[Reference]:
        """Extract and resolve a file's references without touching the index.

        Args:
            file_path: File to inspect

        Returns:
            References sorted by specifier (empty if the file is unreadable)
        """
        file_path = canonical_path(file_path)
        specifiers = self._read_references(file_path)
        if specifiers is None:
            return []
        return [self._resolver.reference(s, file_path) for s in sorted(specifiers)]

    def imports_for_file(self, file_path: str | Path) -> list[str]:
        """Resolve a file's local imports without updating the index.

        Args:
            file_path: File to inspect

        Returns:
            Sorted resolved file paths
        """
        return sorted(
            {r.resolved_path for r in self.references_for_file(file_path) if r.resolved_path}
        )

    def outgoing(self, file_path: str | Path) -> list[str]:
        """Get files the given file imports, sorted."""
        with self._graph_lock:
            return self._graph.outgoing(canonical_path(file_path))

    def incoming(self, file_path: str | Path) -> list[str]:
        """Get files that import the given file, sorted."""
        with self._graph_lock:
            return self._graph.incoming(canonical_path(file_path))

    def dependency_chain(self, source_path: str | Path, target_path: str | Path) -> list[str]:
        """Shortest import chain from one file to another (empty if unreachable)."""
        with self._graph_lock:
            try:
                return nx.shortest_path(
                    self._graph.graph, canonical_path(source_path), canonical_path(target_path)
                )
            except (nx.NetworkXNoPath, nx.NodeNotFound):
                return []

    def find_cycles_through(self, file_path: str | Path) -> list[list[str]]:
        """Find dependency cycles involving the given file."""
        with self._graph_lock:
            return find_cycles_through(self._graph, canonical_path(file_path))

    def find_all_cycles(self) -> list[CycleInfo]:
        """Find every dependency cycle in the project, most critical first."""
        with self._graph_lock:
            return find_all_cycles(self._graph, self._policy)

    def cycles_by_severity(self) -> dict[CycleSeverity, list[CycleInfo]]:
        """Get project-wide cycles grouped by severity."""
        return group_by_severity(self.find_all_cycles())

    def get_statistics(self) -> dict[str, int]:
        """Get index statistics."""
        with self._graph_lock:
            stats = self._graph.get_statistics()
        stats["aliases"] = len(self._resolver.alias_table)
        return stats
