"""Tree-sitter extraction of local module references from source files."""

import logging
from collections.abc import Iterable

from tree_sitter import Node, Parser, Query, QueryCursor

from .languages import DEFAULT_LANGUAGE, LANGUAGE_CONFIGS

logger = logging.getLogger(__name__)

RELATIVE_PREFIXES = ("./", "../")

# Used until an alias table has been loaded for the project
DEFAULT_ALIAS_PATTERNS = ("@/",)


def is_relative_specifier(specifier: str) -> bool:
    """Check whether a specifier is a ``./`` or ``../`` relative path."""
    return specifier.startswith(RELATIVE_PREFIXES)


class ImportExtractor:
    """Extracts the set of local module specifiers referenced by a file.

    A specifier is local when it is relative, starts with a registered alias
    pattern, or looks like a bare ``@alias`` (an ``@`` name with no ``/``).
    Scoped packages such as ``@org/pkg`` and bare package names are dropped.
    """

    def __init__(self, alias_patterns: Iterable[str] = DEFAULT_ALIAS_PATTERNS):
        """Initialize the extractor.

        Args:
            alias_patterns: Alias prefixes that mark a specifier as local
        """
        self._alias_patterns: tuple[str, ...] = tuple(alias_patterns)
        self._parsers: dict[str, Parser] = {}
        self._queries: dict[str, Query] = {}
        self._init_parsers()

    def _init_parsers(self) -> None:
        """Initialize Tree-sitter parsers and queries for all languages."""
        for lang_name, config in LANGUAGE_CONFIGS.items():
            self._parsers[lang_name] = Parser(config.language)
            self._queries[lang_name] = Query(config.language, config.reference_query)

    @property
    def alias_patterns(self) -> tuple[str, ...]:
        """Alias prefixes currently treated as local."""
        return self._alias_patterns

    def set_alias_patterns(self, patterns: Iterable[str]) -> None:
        """Update the alias patterns used for local import detection.

        Args:
            patterns: Alias prefixes (typically from ``AliasTable.alias_patterns``)
        """
        self._alias_patterns = tuple(patterns)

    def is_local_import(self, specifier: str) -> bool:
        """Check if a specifier refers to a project file rather than a package.

        Args:
            specifier: Raw specifier as written in source

        Returns:
            True for relative, alias and bare ``@alias`` specifiers
        """
        if is_relative_specifier(specifier):
            return True

        for alias in self._alias_patterns:
            if alias.endswith("/"):
                if specifier.startswith(alias):
                    return True
            # "@" (from "@/") must not swallow "@angular/core"
            elif specifier == alias or specifier.startswith(alias + "/"):
                return True

        # @components is an alias, @org/pkg is a scoped package
        if specifier.startswith("@") and "/" not in specifier[1:]:
            return True

        return False

    def extract_specifiers(self, content: str | bytes, language: str = DEFAULT_LANGUAGE) -> set[str]:
        """Extract every module specifier referenced by the content.

        Malformed or partial syntax never raises; constructs Tree-sitter
        cannot recover are simply not extracted.

        Args:
            content: Raw file content
            language: Grammar to parse with (see ``LANGUAGE_CONFIGS``)

        Returns:
            Set of raw specifiers, local or not
        """
        if language not in self._parsers:
            language = DEFAULT_LANGUAGE

        source = content.encode("utf-8") if isinstance(content, str) else content
        tree = self._parsers[language].parse(source)
        captures = QueryCursor(self._queries[language]).captures(tree.root_node)

        specifiers: set[str] = set()
        for node in captures.get("import.source", []):
            specifier = self._string_value(node, source)
            if specifier:
                specifiers.add(specifier)
        return specifiers

    def extract_local_references(
        self, content: str | bytes, language: str = DEFAULT_LANGUAGE
    ) -> set[str]:
        """Extract the local module specifiers referenced by the content.

        Args:
            content: Raw file content
            language: Grammar to parse with

        Returns:
            Set of local specifiers (duplicates collapsed)
        """
        return {
            specifier
            for specifier in self.extract_specifiers(content, language)
            if self.is_local_import(specifier)
        }

    def _string_value(self, node: Node, source: bytes) -> str:
        """Get the unquoted value of a string literal node."""
        if node.has_error:
            return ""
        text = source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
        return text.strip("'\"")
