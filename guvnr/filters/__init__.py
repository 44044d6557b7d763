"""File filtering.

Gitignore-aware path filtering backed by the pathspec library.
"""

from guvnr.filters.pathspec_filter import (
    PathspecFilter,
    DEFAULT_IGNORE_PATTERNS,
)

__all__ = [
    "PathspecFilter",
    "DEFAULT_IGNORE_PATTERNS",
]
