"""TODO marker metrics.

Finds TODO-style markers in source text, flags critical ones in staged
changes and summarises them across a project tree.
"""

from guvnr.metrics.todos import (
    TodoAnalyzer,
    TodoCheck,
    TodoItem,
    TodoPriority,
    TodoSummary,
    check_staged_todos,
    find_todos,
    is_critical,
)

__all__ = [
    "TodoAnalyzer",
    "TodoCheck",
    "TodoItem",
    "TodoPriority",
    "TodoSummary",
    "check_staged_todos",
    "find_todos",
    "is_critical",
]
