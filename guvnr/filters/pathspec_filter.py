"""Pathspec-based file filtering.

Honours the root ``.gitignore``, nested ``.gitignore`` files and any
extra exclude patterns from ``guvnr.yaml``. When the project has no
``.gitignore`` a default list of dependency and build directories is used.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

import pathspec

logger = logging.getLogger(__name__)


# Default ignore patterns when no .gitignore exists
DEFAULT_IGNORE_PATTERNS: list[str] = [
    "node_modules/",
    "venv/",
    ".venv/",
    "__pycache__/",
    ".git/",
    "dist/",
    "build/",
    "vendor/",
    "*.min.js",
    ".idea/",
    ".vscode/",
    "*.egg-info/",
    ".tox/",
    ".pytest_cache/",
    ".mypy_cache/",
    "coverage/",
    ".tmp/",
]

# Never scanned, whatever .gitignore says
ALWAYS_IGNORED: list[str] = [".git/"]


def _spec(lines: Iterable[str]) -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


class PathspecFilter:
    """File filter with nested gitignore support."""

    def __init__(
        self,
        repo_path: Path,
        include_nested: bool = True,
        extra_patterns: Optional[list[str]] = None,
    ):
        """
        Initialize the filter.

        Args:
            repo_path: Repository root path
            include_nested: Whether to include nested .gitignore files
            extra_patterns: Additional gitignore-style exclude patterns
        """
        self.repo_path = repo_path
        self._include_nested = include_nested
        self._nested_specs: dict[Path, pathspec.PathSpec] = {}
        self._always_spec = _spec(ALWAYS_IGNORED)
        self._extra_spec = _spec(extra_patterns or [])
        self._root_spec = self._load_root_gitignore()
        if include_nested:
            self._load_nested_gitignores()

    def _load_root_gitignore(self) -> pathspec.PathSpec:
        gitignore_path = self.repo_path / ".gitignore"
        if not gitignore_path.is_file():
            return _spec(DEFAULT_IGNORE_PATTERNS)
        try:
            lines = gitignore_path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read {gitignore_path}: {e}; using default ignores")
            return _spec(DEFAULT_IGNORE_PATTERNS)
        return _spec(lines)

    def _load_nested_gitignores(self) -> None:
        for gitignore_path in self.repo_path.rglob(".gitignore"):
            if gitignore_path.parent == self.repo_path:
                continue
            if self._always_spec.match_file(self._relative(gitignore_path)):
                continue
            try:
                lines = gitignore_path.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable {gitignore_path}: {e}")
                continue
            self._nested_specs[gitignore_path.parent] = _spec(lines)

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.repo_path).as_posix()
        except ValueError:
            if path.is_absolute():
                raise
            # already relative to the repository root
            return path.as_posix()

    def should_ignore(self, path: Path) -> bool:
        """
        Check if a file should be ignored.

        Root rules, extra patterns and always-ignored directories apply
        to every path; a nested .gitignore applies only below its directory.
        """
        try:
            relative_str = self._relative(path)
        except ValueError:
            # outside the repository
            return True

        for spec in (self._always_spec, self._extra_spec, self._root_spec):
            if spec.match_file(relative_str):
                return True

        if not self._include_nested:
            return False

        for gitignore_dir in sorted(self._nested_specs, key=lambda p: len(p.parts), reverse=True):
            base = gitignore_dir.relative_to(self.repo_path).as_posix()
            if not relative_str.startswith(base + "/"):
                continue
            if self._nested_specs[gitignore_dir].match_file(relative_str[len(base) + 1:]):
                return True
        return False

    def filter_paths(self, paths: list[Path]) -> list[Path]:
        """Filter paths, returning those that should NOT be ignored."""
        return [p for p in paths if not self.should_ignore(p)]
