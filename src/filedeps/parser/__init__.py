"""Parser module for extracting module references using Tree-sitter."""

from .imports import DEFAULT_ALIAS_PATTERNS, ImportExtractor, is_relative_specifier
from .languages import (
    DEFAULT_EXTENSIONS,
    IGNORED_DIRECTORIES,
    LANGUAGE_CONFIGS,
    SourceGrammar,
    find_source_files,
    get_language_for_file,
    is_supported_file,
    should_ignore_path,
)

__all__ = [
    # Extraction
    "DEFAULT_ALIAS_PATTERNS",
    "ImportExtractor",
    "is_relative_specifier",
    # Grammars and file selection
    "DEFAULT_EXTENSIONS",
    "IGNORED_DIRECTORIES",
    "LANGUAGE_CONFIGS",
    "SourceGrammar",
    "find_source_files",
    "get_language_for_file",
    "is_supported_file",
    "should_ignore_path",
]
