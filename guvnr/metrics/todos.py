"""TODO analyzer with categorization.

Categorizes TODO markers by priority, provides context lines, and
applies the commit-time policy: critical markers block, too many new
TODO/FIXME markers warn.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from guvnr.core.scanner import sanitize_excerpt
from guvnr.filters.pathspec_filter import PathspecFilter
from guvnr.repo.diff import StagedAddition
from guvnr.repo.files import read_text_file


class TodoPriority(Enum):
    """TODO priority levels."""
    TODO = "TODO"      # Standard TODO
    FIXME = "FIXME"    # Bug or issue to fix
    HACK = "HACK"      # Temporary workaround
    XXX = "XXX"        # Attention needed
    NOTE = "NOTE"      # Informational note
    OPTIMIZE = "OPTIMIZE"  # Performance improvement needed


# Priority weights for scoring
PRIORITY_WEIGHTS: dict[TodoPriority, float] = {
    TodoPriority.FIXME: 1.0,
    TodoPriority.HACK: 0.8,
    TodoPriority.XXX: 0.7,
    TodoPriority.TODO: 0.5,
    TodoPriority.OPTIMIZE: 0.3,
    TodoPriority.NOTE: 0.1,
}

DEFAULT_MAX_NEW = 3

# Pattern to match TODO-style comments
TODO_PATTERN = re.compile(
    r'\b(TODO|FIXME|HACK|XXX|NOTE|OPTIMIZE)\b[:\s]*(.{0,100})',
    re.IGNORECASE
)

# Marker followed on the same line by an urgency signal
CRITICAL_PATTERN = re.compile(r'\b(?:TODO|FIXME|HACK|XXX)\b.*(?:!|CRITICAL|URGENT|BLOCKING)')

# Markers counted against the per-commit budget
NEW_TODO_PATTERN = re.compile(r'\b(?:TODO|FIXME)\b')

SOURCE_SUFFIXES: frozenset[str] = frozenset({
    ".py", ".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".go",
    ".rs", ".java", ".kt", ".c", ".cpp", ".h", ".rb", ".php",
    ".sh", ".yaml", ".yml", ".md",
})


@dataclass
class TodoItem:
    """A TODO item with context."""
    text: str
    file_path: str
    line_number: int
    priority: TodoPriority
    context_before: str  # Line before
    context_after: str   # Line after
    full_line: str
    critical: bool = False


@dataclass
class TodoSummary:
    """Summary of TODO analysis."""
    total_count: int = 0
    critical_count: int = 0
    by_priority: dict[str, int] = field(default_factory=dict)
    items: list[TodoItem] = field(default_factory=list)
    weighted_score: float = 0.0  # Higher = more critical TODOs


@dataclass(frozen=True)
class TodoCheck:
    """
    Result of the staged-changes TODO policy.

    Attributes:
        critical: Critical markers found in added lines
        count: Number of new TODO/FIXME markers
        max_new: Budget the count was compared against
    """
    critical: tuple[TodoItem, ...] = ()
    count: int = 0
    max_new: int = DEFAULT_MAX_NEW

    @property
    def warn(self) -> bool:
        return self.count > self.max_new

    @property
    def blocked(self) -> bool:
        return bool(self.critical)


def is_critical(line: str) -> bool:
    """Return True if a TODO/FIXME/HACK/XXX marker is flagged urgent on this line."""
    return bool(CRITICAL_PATTERN.search(line))


def find_todos(
    text: str,
    source: str = "<text>",
    line_map: Optional[tuple[int, ...]] = None,
) -> list[TodoItem]:
    """
    Find TODO markers in text.

    Args:
        text: Text to search
        source: Path label stored on each item
        line_map: Optional mapping from text line index to source line number

    Returns:
        TodoItem list in line order; captured text is stripped of
        terminal escapes and control characters
    """
    items: list[TodoItem] = []
    lines = text.split("\n")

    for i, line in enumerate(lines):
        match = TODO_PATTERN.search(line)
        if not match:
            continue

        keyword = match.group(1).upper()
        line_number = line_map[i] if line_map and i < len(line_map) else i + 1
        context_before = lines[i - 1].strip() if i > 0 else ""
        context_after = lines[i + 1].strip() if i < len(lines) - 1 else ""

        items.append(TodoItem(
            text=sanitize_excerpt(match.group(2).strip()) if match.group(2) else "",
            file_path=source,
            line_number=line_number,
            priority=TodoPriority[keyword],
            context_before=sanitize_excerpt(context_before, 80),
            context_after=sanitize_excerpt(context_after, 80),
            full_line=sanitize_excerpt(line.strip(), 120),
            critical=is_critical(line),
        ))

    return items


def check_staged_todos(
    additions: Iterable[StagedAddition],
    max_new: int = DEFAULT_MAX_NEW,
) -> TodoCheck:
    """
    Apply the commit-time TODO policy to staged additions.

    Critical markers block the commit; more than ``max_new`` new
    TODO/FIXME markers only warn.
    """
    critical: list[TodoItem] = []
    count = 0

    for addition in additions:
        for item in find_todos(addition.text, addition.path, addition.line_map):
            if item.critical:
                critical.append(item)
        count += sum(1 for line in addition.lines if NEW_TODO_PATTERN.search(line))

    return TodoCheck(critical=tuple(critical), count=count, max_new=max_new)


class TodoAnalyzer:
    """Analyzer for TODO comments across a project tree."""

    def __init__(self, repo_path: Path, extra_patterns: Optional[list[str]] = None):
        self.repo_path = repo_path
        self._pathspec_filter = PathspecFilter(repo_path, extra_patterns=extra_patterns)

    def analyze(self, max_items: int = 50) -> TodoSummary:
        """
        Analyze TODOs in the repository.

        Args:
            max_items: Maximum number of TODO items to collect

        Returns:
            TodoSummary with categorized results
        """
        summary = TodoSummary()
        for priority in TodoPriority:
            summary.by_priority[priority.value] = 0

        for file_path in sorted(self.repo_path.rglob("*")):
            if not file_path.is_file():
                continue
            if file_path.suffix.lower() not in SOURCE_SUFFIXES:
                continue
            if self._pathspec_filter.should_ignore(file_path):
                continue

            for item in self._analyze_file(file_path):
                summary.total_count += 1
                summary.by_priority[item.priority.value] += 1
                if item.critical:
                    summary.critical_count += 1
                if len(summary.items) < max_items:
                    summary.items.append(item)

        summary.weighted_score = self._calculate_weighted_score(summary)
        return summary

    def _analyze_file(self, file_path: Path) -> list[TodoItem]:
        content = read_text_file(file_path)
        if content is None:
            return []
        relative_path = file_path.relative_to(self.repo_path).as_posix()
        return find_todos(content, relative_path)

    def _calculate_weighted_score(self, summary: TodoSummary) -> float:
        """Calculate weighted TODO score (higher = more critical)."""
        if summary.total_count == 0:
            return 0.0

        weighted_sum = 0.0
        for priority in TodoPriority:
            count = summary.by_priority.get(priority.value, 0)
            weighted_sum += count * PRIORITY_WEIGHTS[priority]

        return weighted_sum / summary.total_count
