"""Import resolver for resolving module specifiers to project files."""

import json
import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..parser.imports import is_relative_specifier

logger = logging.getLogger(__name__)

# Probed in order: bare path, then source extensions, then directory index files
SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")
RESOLUTION_SUFFIXES = (
    "",
    *SOURCE_EXTENSIONS,
    *(f"/index{ext}" for ext in SOURCE_EXTENSIONS),
)

CONFIG_FILENAMES = ("tsconfig.json", "jsconfig.json")
COMMON_CONFIG_DIRS = ("frontend", "src", "app", "client")
EXCLUDED_CONFIG_DIRS = frozenset({"node_modules", ".git", "dist", "build", "coverage"})

# Strings are matched first so comment markers inside them survive
_COMMENT_PATTERN = re.compile(
    r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/',
    re.DOTALL,
)
_TRAILING_COMMA_PATTERN = re.compile(
    r'("(?:\\.|[^"\\])*")|,(\s*[}\]])',
)


def resolution_suffixes(extensions: Iterable[str] = ()) -> tuple[str, ...]:
    """Build the probe suffixes for a set of indexed extensions.

    The default extensions keep their fixed order; any others (``.mts``,
    ``.cjs``...) are tried after them, in the order given.
    """
    extra = tuple(dict.fromkeys(e for e in extensions if e not in SOURCE_EXTENSIONS))
    if not extra:
        return RESOLUTION_SUFFIXES
    ordered = SOURCE_EXTENSIONS + extra
    return ("", *ordered, *(f"/index{ext}" for ext in ordered))


def canonical_path(path: str | Path) -> str:
    """Normalize a file path to its canonical absolute identity."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


@dataclass
class Reference:
    """A module reference found in a source file."""

    raw_specifier: str  # Specifier as written in source
    resolved_path: str | None  # Canonical file path (None if unresolved)
    is_local: bool  # True for relative/alias specifiers


@dataclass
class AliasTable:
    """Alias prefixes mapped to absolute base paths.

    Insertion order is registration order, which breaks ties between
    aliases of equal length.
    """

    base_dir: Path
    base_url: str = "."
    aliases: dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.aliases)

    def match(self, specifier: str) -> tuple[str, str] | None:
        """Find the longest alias prefix matching a specifier.

        Args:
            specifier: Raw module specifier

        Returns:
            (alias, target) pair or None if no alias applies
        """
        best: tuple[str, str] | None = None
        for alias, target in self.aliases.items():
            if specifier == alias or specifier.startswith(alias):
                if best is None or len(alias) > len(best[0]):
                    best = (alias, target)
        return best

    def alias_patterns(self) -> list[str]:
        """Get alias prefixes for local import detection.

        Each alias is listed as-is and, when it ends in ``/``, without the
        trailing slash as well.
        """
        patterns: list[str] = []
        for alias in self.aliases:
            patterns.append(alias)
            if alias.endswith("/"):
                patterns.append(alias[:-1])
        return patterns


def strip_json_comments(content: str) -> str:
    """Remove line/block comments and trailing commas from JSON-with-comments text."""
    without_comments = _COMMENT_PATTERN.sub(lambda m: m.group(1) or "", content)
    return _TRAILING_COMMA_PATTERN.sub(
        lambda m: m.group(1) or m.group(2), without_comments
    )


def parse_config_text(content: str) -> dict[str, Any]:
    """Parse tsconfig-style JSON, tolerating comments and trailing commas.

    Raises:
        ValueError: If the content is not a JSON object
    """
    data = json.loads(strip_json_comments(content))
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be an object")
    return data


def find_config_file(project_root: Path) -> Path | None:
    """Locate the project configuration file.

    Search order: the project root, a few common sub-directories, then
    every immediate non-hidden sub-directory except build/dependency/VCS ones.

    Args:
        project_root: Root directory of the project

    Returns:
        Path to the configuration file or None
    """
    candidates = [project_root] + [project_root / d for d in COMMON_CONFIG_DIRS]
    for directory in candidates:
        for name in CONFIG_FILENAMES:
            config_path = directory / name
            if config_path.is_file():
                return config_path

    try:
        entries = sorted(project_root.iterdir())
    except OSError as e:
        logger.warning(f"Failed to search subfolders in {project_root}: {e}")
        return None

    for entry in entries:
        if (
            entry.name.startswith(".")
            or entry.name in EXCLUDED_CONFIG_DIRS
            or not entry.is_dir()
        ):
            continue
        for name in CONFIG_FILENAMES:
            config_path = entry / name
            if config_path.is_file():
                return config_path

    return None


def _load_extended_config(config_path: Path, extends: str) -> dict[str, Any] | None:
    """Load the base configuration named by an ``extends`` entry."""
    base_path = (config_path.parent / extends).resolve()
    if base_path.suffix != ".json":
        base_path = base_path.with_name(base_path.name + ".json")

    if not base_path.is_file():
        logger.debug(f"Extended config not found: {base_path}")
        return None

    return parse_config_text(base_path.read_text(encoding="utf-8"))


def merge_configs(base: dict[str, Any], derived: dict[str, Any]) -> dict[str, Any]:
    """Merge a derived configuration over its base.

    Top-level keys, ``compilerOptions`` and ``compilerOptions.paths`` are
    merged one level deep with the derived entries winning on collision.
    """
    base_options = base.get("compilerOptions") or {}
    derived_options = derived.get("compilerOptions") or {}
    return {
        **base,
        **derived,
        "compilerOptions": {
            **base_options,
            **derived_options,
            "paths": {
                **(base_options.get("paths") or {}),
                **(derived_options.get("paths") or {}),
            },
        },
    }


def load_config(config_path: Path) -> dict[str, Any]:
    """Read a configuration file and resolve a single level of ``extends``.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file (or its base) is not valid configuration JSON
    """
    config = parse_config_text(config_path.read_text(encoding="utf-8"))

    extends = config.get("extends")
    if isinstance(extends, str) and extends:
        base = _load_extended_config(config_path, extends)
        if base is not None:
            config = merge_configs(base, config)

    return config


def _normalize_alias(alias: str, target: str) -> tuple[str, str]:
    """Strip wildcard suffixes from an alias and its target."""
    if target.startswith("./"):
        target = target[2:]

    if alias.endswith("/*"):
        # "@/*" -> "@/"
        clean_alias = alias[:-1]
        clean_target = target[:-1] if target.endswith("/*") else target.rstrip("*")
    elif alias.endswith("*"):
        # "@*" -> "@"
        clean_alias = alias[:-1]
        clean_target = target.rstrip("*")
    else:
        clean_alias = alias
        clean_target = target

    return clean_alias, clean_target


def _normalize_base_url(base_url: str) -> str:
    """Normalize a ``baseUrl`` so "." and "./x" join cleanly."""
    if base_url.startswith("./"):
        base_url = base_url[2:]
    if base_url == ".":
        base_url = ""
    return base_url


def build_alias_table(config: dict[str, Any], base_dir: Path) -> AliasTable:
    """Build an alias table from a parsed configuration.

    Args:
        config: Parsed (and merged) configuration
        base_dir: Directory the configuration lives in

    Returns:
        AliasTable mapping cleaned alias prefixes to absolute base paths
    """
    options = config.get("compilerOptions") or {}
    paths = options.get("paths") or {}
    base_url = options.get("baseUrl") or "."
    normalized_base_url = _normalize_base_url(base_url)

    table = AliasTable(base_dir=base_dir, base_url=base_url)

    for alias, targets in paths.items():
        if not isinstance(targets, list) or not targets or not isinstance(targets[0], str):
            continue

        clean_alias, clean_target = _normalize_alias(alias, targets[0])
        if clean_alias in table.aliases:
            # "@/*" and "@/" collide after normalization; first registered wins
            logger.debug(f"Ignoring duplicate alias {alias!r}")
            continue

        resolved = os.path.join(str(base_dir), normalized_base_url, clean_target)
        table.aliases[clean_alias] = resolved

    return table


def load_alias_table(project_root: Path | str) -> AliasTable:
    """Load path aliases from the project configuration.

    A missing or unparsable configuration is not an error: an empty table
    is returned and only relative imports will resolve.

    Args:
        project_root: Root directory of the project

    Returns:
        AliasTable (possibly empty)
    """
    project_root = Path(project_root)
    config_path = find_config_file(project_root)

    if config_path is None:
        logger.debug(f"No tsconfig/jsconfig found under {project_root}")
        return AliasTable(base_dir=project_root)

    try:
        config = load_config(config_path)
    except (OSError, ValueError) as e:
        logger.warning(f"Error loading {config_path}: {e}")
        return AliasTable(base_dir=project_root)

    table = build_alias_table(config, config_path.parent)
    logger.info(f"Loaded {len(table)} path aliases from {config_path}")
    return table


class ImportResolver:
    """Resolves module specifiers to canonical absolute file paths."""

    def __init__(
        self,
        project_root: Path | str,
        alias_table: AliasTable | None = None,
        extensions: Iterable[str] = SOURCE_EXTENSIONS,
    ):
        """Initialize the import resolver.

        Args:
            project_root: Root directory of the project
            alias_table: Preloaded alias table (empty if not given)
            extensions: Indexed source extensions, probed when a specifier
                        omits its extension
        """
        self.project_root = Path(project_root)
        self.alias_table = alias_table or AliasTable(base_dir=self.project_root)
        self.suffixes = resolution_suffixes(extensions)

    def load_aliases(self) -> AliasTable:
        """Reload the alias table from the project configuration."""
        self.alias_table = load_alias_table(self.project_root)
        return self.alias_table

    def resolve(self, specifier: str, from_file: str | Path) -> str | None:
        """Resolve a specifier to a file path.

        Args:
            specifier: Raw module specifier
            from_file: File containing the reference

        Returns:
            Canonical path of the referenced file or None if unresolvable
        """
        base_path: str | None = None

        if is_relative_specifier(specifier):
            base_path = os.path.join(os.path.dirname(os.fspath(from_file)), specifier)
        else:
            match = self.alias_table.match(specifier)
            if match:
                alias, target = match
                base_path = target + specifier[len(alias):]

        if base_path is None:
            return None

        return self._resolve_with_extensions(canonical_path(base_path))

    def reference(self, specifier: str, from_file: str | Path, is_local: bool = True) -> Reference:
        """Build a Reference record for a specifier."""
        resolved = self.resolve(specifier, from_file) if is_local else None
        return Reference(raw_specifier=specifier, resolved_path=resolved, is_local=is_local)

    def _resolve_with_extensions(self, base_path: str) -> str | None:
        """Try each resolution suffix and return the first regular file."""
        for suffix in self.suffixes:
            candidate = base_path + suffix
            if os.path.isfile(candidate):
                return candidate
        return None
