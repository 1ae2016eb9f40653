"""Graph storage using NetworkX for the in-memory file dependency index."""

import logging
from collections.abc import Iterable

import networkx as nx

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Forward/reverse file dependency index backed by a NetworkX DiGraph.

    Successors of a node are the files it imports (forward edges) and
    predecessors are the files importing it (reverse edges), so the two
    views can never disagree. Nodes are either indexed files or files that
    are only known as import targets; the latter are pruned as soon as
    nothing references them any more.
    """

    def __init__(self):
        """Initialize an empty directed graph."""
        self._graph = nx.DiGraph()

    @property
    def graph(self) -> nx.DiGraph:
        """Access the underlying NetworkX graph."""
        return self._graph

    def is_indexed(self, file_path: str) -> bool:
        """Check whether a file has been indexed (has a forward entry)."""
        return bool(self._graph.nodes.get(file_path, {}).get("indexed"))

    @property
    def indexed_files(self) -> list[str]:
        """All indexed files, sorted."""
        return sorted(n for n, indexed in self._graph.nodes(data="indexed") if indexed)

    def __len__(self) -> int:
        """Number of indexed files."""
        return sum(1 for _, indexed in self._graph.nodes(data="indexed") if indexed)

    def __contains__(self, file_path: str) -> bool:
        return file_path in self._graph

    def set_dependencies(self, file_path: str, targets: Iterable[str]) -> None:
        """Replace every forward edge owned by a file.

        Old edges (and their reverse entries) are dropped before the new
        ones are inserted, so calling this repeatedly with the same targets
        is idempotent.

        Args:
            file_path: The importing file
            targets: Files it imports
        """
        self._remove_forward_edges(file_path)

        self._graph.add_node(file_path, indexed=True)
        for target in targets:
            if target not in self._graph:
                self._graph.add_node(target, indexed=False)
            self._graph.add_edge(file_path, target)

    def remove_file(self, file_path: str) -> bool:
        """Remove an indexed file's forward edges and its forward entry.

        The node itself stays while other files still import it.

        Args:
            file_path: File to remove

        Returns:
            True if the file was indexed
        """
        if not self.is_indexed(file_path):
            return False

        self._remove_forward_edges(file_path)
        self._graph.nodes[file_path]["indexed"] = False
        self._prune(file_path)
        return True

    def _remove_forward_edges(self, file_path: str) -> None:
        """Drop a file's outgoing edges, pruning targets nothing else references."""
        if file_path not in self._graph:
            return

        old_targets = list(self._graph.successors(file_path))
        self._graph.remove_edges_from((file_path, t) for t in old_targets)
        for target in old_targets:
            self._prune(target)

    def _prune(self, file_path: str) -> None:
        """Remove a node that is neither indexed nor referenced."""
        if (
            file_path in self._graph
            and not self._graph.nodes[file_path].get("indexed")
            and self._graph.in_degree(file_path) == 0
            and self._graph.out_degree(file_path) == 0
        ):
            self._graph.remove_node(file_path)

    def outgoing(self, file_path: str) -> list[str]:
        """Get files the given file imports, sorted.

        Args:
            file_path: Importing file

        Returns:
            Sorted list of imported files (empty if unknown)
        """
        if file_path not in self._graph:
            return []
        return sorted(self._graph.successors(file_path))

    def incoming(self, file_path: str) -> list[str]:
        """Get files importing the given file, sorted.

        Args:
            file_path: Imported file

        Returns:
            Sorted list of importing files (empty if unknown)
        """
        if file_path not in self._graph:
            return []
        return sorted(self._graph.predecessors(file_path))

    def successors(self, file_path: str) -> list[str]:
        """Alias of ``outgoing`` used by the traversal algorithms."""
        return self.outgoing(file_path)

    @property
    def forward(self) -> dict[str, set[str]]:
        """Snapshot of the forward mapping (indexed file -> imported files)."""
        return {
            node: set(self._graph.successors(node))
            for node, indexed in self._graph.nodes(data="indexed")
            if indexed
        }

    @property
    def reverse(self) -> dict[str, set[str]]:
        """Snapshot of the reverse mapping (file -> importing files).

        Files nothing imports have no entry.
        """
        return {
            node: set(self._graph.predecessors(node))
            for node in self._graph.nodes
            if self._graph.in_degree(node) > 0
        }

    def get_statistics(self) -> dict[str, int]:
        """Get graph statistics.

        Returns:
            Dictionary with counts of indexed files, nodes and edges
        """
        return {
            "files": len(self),
            "nodes": self._graph.number_of_nodes(),
            "edges": self._graph.number_of_edges(),
        }

    def clear(self) -> None:
        """Clear all nodes and edges from the graph."""
        self._graph.clear()
