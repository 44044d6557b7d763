"""Tests for file collection and staged diff reading."""

from pathlib import Path

import pytest

from guvnr.core.scanner import Category, FileKind
from guvnr.errors import PathNotFoundError, StagedDiffError
from guvnr.repo import (
    iter_source_files,
    parse_unified_diff,
    read_staged_additions,
    scan_files,
    scan_staged,
)

DIFF = """diff --git a/app.py b/app.py
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/app.py
@@ -0,0 +1,2 @@
+import os
+x = eval(data)
diff --git a/old.py b/old.py
deleted file mode 100644
--- a/old.py
+++ /dev/null
@@ -1 +0,0 @@
-print(1)
diff --git a/lib.js b/lib.js
index 1111111..2222222 100644
--- a/lib.js
+++ b/lib.js
@@ -10,0 +11 @@ function x() {
+el.innerHTML = html;
@@ -20 +21,0 @@ function y() {
-removed();
"""


class TestParseUnifiedDiff:
    """Added lines and their new-file line numbers."""

    def test_additions_per_file(self):
        additions = parse_unified_diff(DIFF)

        assert [a.path for a in additions] == ["app.py", "lib.js"]
        assert additions[0].lines == ("import os", "x = eval(data)")
        assert additions[0].line_map == (1, 2)
        assert additions[1].line_map == (11,)
        assert additions[1].text == "el.innerHTML = html;"

    def test_added_line_that_looks_like_header(self):
        diff = "diff --git a/n.md b/n.md\n--- a/n.md\n+++ b/n.md\n@@ -1,0 +2 @@\n+++ b/fake\n"

        additions = parse_unified_diff(diff)

        assert additions[0].lines == ("++ b/fake",)

    @pytest.mark.parametrize("header, expected", [
        ('+++ "b/caf\\303\\251.py"', "café.py"),
        ('+++ "b/say \\"hi\\".py"', 'say "hi".py'),
        ('+++ "b/tab\\there.py"', "tab\there.py"),
        ("+++ b/with space.py\t", "with space.py"),
    ])
    def test_quoted_paths_are_decoded(self, header, expected):
        diff = f"diff --git a/x b/x\nnew file mode 100644\n--- /dev/null\n{header}\n@@ -0,0 +1 @@\n+eval(x)\n"

        assert parse_unified_diff(diff)[0].path == expected

    def test_empty_diff(self):
        assert parse_unified_diff("") == []


class TestScanStaged:
    """Scanner fan-out over staged additions."""

    def test_line_numbers_map_back(self):
        results = scan_staged(Path("."), "strict", additions=parse_unified_diff(DIFF))

        by_path = {r.path: r for r in results}
        eval_finding = by_path["app.py"].report.findings[0]
        assert eval_finding.category == Category.EVAL_USAGE
        assert by_path["app.py"].source_line(eval_finding) == 2

        html = by_path["lib.js"].report.findings[0]
        assert html.category == Category.XSS_INNER_HTML
        assert by_path["lib.js"].source_line(html) == 11

    def test_real_git_index(self, git_repo, stage):
        stage("src/app.py", "import os\n\nvalue = eval(payload)\n")
        stage("notes.txt", "eval(x)\n")

        additions = read_staged_additions(Path(git_repo.working_tree_dir))
        assert {a.path for a in additions} == {"src/app.py", "notes.txt"}

        results = scan_staged(Path(git_repo.working_tree_dir))
        assert [r.path for r in results] == ["src/app.py"]
        finding = results[0].report.findings[0]
        assert results[0].source_line(finding) == 3

    def test_non_ascii_path_from_real_index(self, git_repo, stage):
        stage("café.py", "x = eval(data)\n")

        results = scan_staged(Path(git_repo.working_tree_dir))

        assert [r.path for r in results] == ["café.py"]

    def test_not_a_repository(self, tmp_path):
        with pytest.raises(StagedDiffError):
            read_staged_additions(tmp_path / "missing")


class TestFiles:
    """Directory walking and file scanning."""

    def test_iter_source_files_uses_default_ignores(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "a.py").write_text("x = 1\n", encoding="utf-8")
        (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
        (tmp_path / "node_modules" / "pkg" / "index.js").write_text("eval(x)\n", encoding="utf-8")
        (tmp_path / "README.md").write_text("# hi\n", encoding="utf-8")
        (tmp_path / "data.bin").write_bytes(b"\x00\x01")

        found = {p.relative_to(tmp_path).as_posix(): kind for p, kind in iter_source_files(tmp_path)}

        assert found == {"README.md": FileKind.MARKDOWN, "src/a.py": FileKind.PYTHON}

    def test_extra_patterns(self, tmp_path):
        (tmp_path / "gen").mkdir()
        (tmp_path / "gen" / "out.js").write_text("x\n", encoding="utf-8")
        (tmp_path / "main.go").write_text("package main\n", encoding="utf-8")

        found = [p.name for p, _ in iter_source_files(tmp_path, extra_patterns=["gen/"])]

        assert found == ["main.go"]

    def test_scan_files_suppresses_fixtures(self, tmp_path):
        for folder in ("src", "tests/fixtures"):
            (tmp_path / folder).mkdir(parents=True)
            (tmp_path / folder / "creds.py").write_text('password = "hunter22hunter22"\n', encoding="utf-8")

        results = {r.path: r.report for r in scan_files(tmp_path)}

        assert results["src/creds.py"].error_count == 1
        assert results["tests/fixtures/creds.py"].clean

    def test_scan_single_file_and_unknown_type(self, tmp_path):
        target = tmp_path / "app.js"
        target.write_text("eval(x)\n", encoding="utf-8")
        other = tmp_path / "notes.txt"
        other.write_text("eval(x)\n", encoding="utf-8")

        results = scan_files(tmp_path, [target, other])

        assert [r.path for r in results] == ["app.js"]

    def test_missing_path(self, tmp_path):
        with pytest.raises(PathNotFoundError):
            scan_files(tmp_path, [tmp_path / "nope"])

    def test_non_utf8_file_is_skipped(self, tmp_path):
        (tmp_path / "bad.py").write_bytes(b"\xff\xfe eval(x)\n")

        assert scan_files(tmp_path) == []

    def test_subdirectory_scan_honours_root_ignores(self, tmp_path):
        (tmp_path / ".gitignore").write_text("src/generated/\n", encoding="utf-8")
        for folder in ("src/generated", "src/vendor", "src/app"):
            (tmp_path / folder).mkdir(parents=True)
            (tmp_path / folder / "bundle.js").write_text("eval(x)\n", encoding="utf-8")

        whole = [r.path for r in scan_files(tmp_path, extra_patterns=["src/vendor/"])]
        sub = [r.path for r in scan_files(tmp_path, [Path("src")], extra_patterns=["src/vendor/"])]

        assert whole == ["src/app/bundle.js"]
        assert sub == whole
