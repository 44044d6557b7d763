"""Tests for TODO marker detection and the staged TODO policy."""

import pytest

from guvnr.metrics.todos import (
    TodoAnalyzer,
    TodoPriority,
    check_staged_todos,
    find_todos,
    is_critical,
)
from guvnr.repo.diff import StagedAddition


@pytest.mark.parametrize("line, expected", [
    ("# TODO: fix this!", True),
    ("// FIXME URGENT race in cache", True),
    ("# XXX BLOCKING release", True),
    ("# TODO: later", False),
    ("# NOTE: important!", False),
    ("# todo: lowercase!", False),
])
def test_is_critical(line, expected):
    assert is_critical(line) is expected


def test_find_todos_with_context_and_line_map():
    text = "a = 1\n# TODO: tidy up\nb = 2\n# hack around upstream bug\n"

    items = find_todos(text, "mod.py", line_map=(10, 11, 12, 13))

    assert [(i.priority, i.line_number) for i in items] == [
        (TodoPriority.TODO, 11),
        (TodoPriority.HACK, 13),
    ]
    assert items[0].text == "tidy up"
    assert items[0].context_before == "a = 1"
    assert items[0].context_after == "b = 2"


def _addition(*lines):
    return StagedAddition(path="app.py", lines=lines, line_map=tuple(range(1, len(lines) + 1)))


class TestStagedPolicy:
    """Critical markers block, too many new markers warn."""

    def test_under_budget(self):
        check = check_staged_todos([_addition("# TODO one", "# FIXME two")])

        assert check.count == 2
        assert not check.warn
        assert not check.blocked

    def test_over_budget_warns(self):
        check = check_staged_todos([
            _addition("# TODO one", "# TODO two"),
            _addition("# FIXME three", "# TODO four"),
        ])

        assert check.count == 4
        assert check.warn
        assert not check.blocked

    def test_custom_budget(self):
        check = check_staged_todos([_addition("# TODO one", "# TODO two")], max_new=1)

        assert check.warn

    def test_critical_blocks(self):
        check = check_staged_todos([_addition("x = 1", "# FIXME CRITICAL data loss")])

        assert check.blocked
        assert check.critical[0].line_number == 2
        assert check.critical[0].file_path == "app.py"


def test_analyzer_respects_gitignore(tmp_path):
    (tmp_path / ".gitignore").write_text("ignored/\n", encoding="utf-8")
    (tmp_path / "a.py").write_text("# TODO: x\n# FIXME: y!\n", encoding="utf-8")
    (tmp_path / "ignored").mkdir()
    (tmp_path / "ignored" / "b.py").write_text("# TODO: hidden\n", encoding="utf-8")
    (tmp_path / "image.png").write_bytes(b"\x89PNG TODO")

    summary = TodoAnalyzer(tmp_path).analyze()

    assert summary.total_count == 2
    assert summary.critical_count == 1
    assert summary.by_priority["TODO"] == 1
    assert summary.by_priority["FIXME"] == 1
    assert {i.file_path for i in summary.items} == {"a.py"}
    assert 0.5 < summary.weighted_score < 1.0
