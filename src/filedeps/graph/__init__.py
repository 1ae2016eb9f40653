"""Graph module for file dependency analysis using NetworkX."""

from .builder import DependencyIndexer
from .cycles import (
    canonical_form,
    deduplicate_cycles,
    find_all_cycles,
    find_cycles_through,
    group_by_severity,
    strongly_connected_components,
)
from .import_resolver import (
    AliasTable,
    ImportResolver,
    Reference,
    canonical_path,
    load_alias_table,
)
from .models import CycleInfo, CycleSeverity, SeverityPolicy
from .queries import (
    find_dependency_chain,
    get_file_cycles,
    get_file_dependencies,
    get_file_dependents,
    get_project_cycles,
)
from .storage import DependencyGraph

__all__ = [
    # Storage
    "DependencyGraph",
    # Builder
    "DependencyIndexer",
    # Import Resolution
    "AliasTable",
    "ImportResolver",
    "Reference",
    "canonical_path",
    "load_alias_table",
    # Cycles
    "CycleInfo",
    "CycleSeverity",
    "SeverityPolicy",
    "canonical_form",
    "deduplicate_cycles",
    "find_all_cycles",
    "find_cycles_through",
    "group_by_severity",
    "strongly_connected_components",
    # Queries
    "find_dependency_chain",
    "get_file_cycles",
    "get_file_dependencies",
    "get_file_dependents",
    "get_project_cycles",
]
