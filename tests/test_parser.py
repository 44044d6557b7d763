"""Tests for the markdown-it heading parser."""

from guvnr.core.parser import parse_markdown


class TestParseMarkdown:
    """Heading detection."""

    def test_headings_in_order(self):
        parsed = parse_markdown("# Project: Acme\n\n## Overview\ntext\n\n## Tech Stack\n")

        assert parsed.title == "Project: Acme"
        assert parsed.headings(2) == ["Overview", "Tech Stack"]
        assert [h.line_number for h in parsed.headers] == [1, 3, 6]

    def test_hash_lines_inside_fences_are_not_headings(self):
        parsed = parse_markdown("## Commands\n\n```bash\n# install\n## not a heading\n```\n")

        assert parsed.headings(1) == []
        assert parsed.headings(2) == ["Commands"]

    def test_no_title(self):
        assert parse_markdown("plain text\n").title is None
