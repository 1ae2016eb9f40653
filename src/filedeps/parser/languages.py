"""Grammars and file selection for TypeScript/JavaScript sources."""

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts
from tree_sitter import Language


@dataclass(frozen=True)
class SourceGrammar:
    """A Tree-sitter grammar and the file extensions parsed with it."""

    name: str
    extensions: tuple[str, ...]
    language: Language
    reference_query: str


# Every module specifier a file can reference, captured as @import.source.
# The TypeScript, TSX and JavaScript grammars share these node types.
MODULE_REFERENCE_QUERY = """
; import x from './a'  |  import type { T } from './a'  |  import './a'
(import_statement source: (string) @import.source)

; export * from './a'  |  export { x } from './a'
(export_statement source: (string) @import.source)

; import('./a')
(call_expression
  function: (import)
  arguments: (arguments . (string) @import.source))

; require('./a')
(call_expression
  function: (identifier) @_callee
  arguments: (arguments . (string) @import.source)
  (#eq? @_callee "require"))
"""

LANGUAGE_CONFIGS: dict[str, SourceGrammar] = {
    grammar.name: grammar
    for grammar in (
        SourceGrammar(
            "typescript",
            (".ts", ".mts", ".cts"),
            Language(tsts.language_typescript()),
            MODULE_REFERENCE_QUERY,
        ),
        SourceGrammar(
            "tsx",
            (".tsx",),
            Language(tsts.language_tsx()),
            MODULE_REFERENCE_QUERY,
        ),
        SourceGrammar(
            "javascript",
            (".js", ".jsx", ".mjs", ".cjs"),
            Language(tsjs.language()),
            MODULE_REFERENCE_QUERY,
        ),
    )
}

_GRAMMAR_BY_EXTENSION = {
    ext: name for name, grammar in LANGUAGE_CONFIGS.items() for ext in grammar.extensions
}

# Grammar for files whose extension has none of its own
DEFAULT_LANGUAGE = "typescript"

DEFAULT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")

# Dependency and build output folders; dot-folders are skipped separately
IGNORED_DIRECTORIES = frozenset({
    "node_modules",
    "bower_components",
    "jspm_packages",
    "dist",
    "build",
    "out",
    "coverage",
    "storybook-static",
})


def get_language_for_file(file_path: Path | str) -> str | None:
    """Name of the grammar that parses ``file_path``, or None."""
    return _GRAMMAR_BY_EXTENSION.get(Path(file_path).suffix.lower())


def is_supported_file(
    file_path: Path | str, extensions: Iterable[str] = DEFAULT_EXTENSIONS
) -> bool:
    """Check a file's extension against the indexed extensions.

    Args:
        file_path: File to check
        extensions: Dotted, lower-case extensions to accept
    """
    return Path(file_path).suffix.lower() in set(extensions)


def should_ignore_path(path: Path) -> bool:
    """Check whether a project-relative path lies in a skipped directory.

    Dependency/build folders and hidden folders (``.git``, ``.next``,
    ``.cache``...) are skipped.
    """
    return any(
        part in IGNORED_DIRECTORIES or (part.startswith(".") and part not in (".", ".."))
        for part in path.parts
    )


def find_source_files(
    root: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS
) -> Iterator[str]:
    """Enumerate candidate source files below a project root.

    Ignored directories are pruned during the walk rather than filtered
    afterwards, so large ``node_modules`` trees are never descended into.

    Args:
        root: Project root directory
        extensions: Dotted, lower-case extensions to accept

    Yields:
        Absolute file paths
    """
    wanted = set(extensions)
    root = Path(root)

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root)
        dirnames[:] = sorted(
            d for d in dirnames if not should_ignore_path(rel_dir / d)
        )
        for filename in sorted(filenames):
            if Path(filename).suffix.lower() in wanted:
                yield os.path.join(dirpath, filename)
