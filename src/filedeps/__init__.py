"""filedeps - file dependency graph and circular import detection for TS/JS projects."""

__version__ = "0.1.0"
