"""Tests for the markdown section extractor."""

import pytest

from guvnr.core.sections import (
    PREAMBLE_KEY,
    MarkdownSection,
    TechStackItem,
    extract_sections,
    extract_security_checklist,
    extract_tech_stack,
    join_sections,
    split_sections,
)

DOC = """# Title
intro

## Overview
Some text
### Sub
more
## Tech Stack
- **Language**: Python
"""


class TestExtractSections:
    """Level-2 heading splitting."""

    def test_round_trip(self):
        assert join_sections(split_sections(DOC)) == DOC

    def test_round_trip_with_duplicates(self):
        text = "## A\none\n## A\ntwo\n"
        assert join_sections(split_sections(text)) == text

    def test_keys_in_document_order(self):
        sections = extract_sections(DOC)

        assert list(sections) == [PREAMBLE_KEY, "Overview", "Tech Stack"]
        assert sections[PREAMBLE_KEY].body == "# Title\nintro\n\n"

    def test_deeper_headings_stay_in_body(self):
        body = extract_sections(DOC)["Overview"].body

        assert body == "Some text\n### Sub\nmore\n"

    def test_missing_heading_returns_none(self):
        assert extract_sections(DOC).get("Nope") is None

    def test_preamble_always_present(self):
        sections = extract_sections("## A\nx\n")

        assert sections[PREAMBLE_KEY] == MarkdownSection(heading=PREAMBLE_KEY, body="")

    def test_empty_text(self):
        assert extract_sections("") == {PREAMBLE_KEY: MarkdownSection(PREAMBLE_KEY, "")}

    def test_first_duplicate_wins(self):
        text = "## A\none\n## A\ntwo\n"

        assert extract_sections(text)["A"].body == "one\n"
        assert len(split_sections(text)) == 3

    def test_heading_keys_are_case_sensitive(self):
        sections = extract_sections("## overview\nx\n")

        assert "overview" in sections
        assert "Overview" not in sections

    def test_heading_needs_space(self):
        sections = extract_sections("##NoSpace\nbody\n")

        assert list(sections) == [PREAMBLE_KEY]

    def test_heading_text_is_verbatim(self):
        sections = extract_sections("## Tech Stack  \nx\n")

        assert "Tech Stack  " in sections


class TestTechStack:
    """`- label: value` lines."""

    def test_plain_and_bold_labels(self):
        body = (
            "- **Language**: Python 3.12\n"
            "- Framework: Typer\n"
            "- [ ] not this\n"
            "plain line\n"
            "- **Database:** Postgres\n"
        )

        assert extract_tech_stack(body) == [
            TechStackItem("Language", "Python 3.12"),
            TechStackItem("Framework", "Typer"),
            TechStackItem("Database", "Postgres"),
        ]

    def test_empty_body(self):
        assert extract_tech_stack("") == []


class TestSecurityChecklist:
    """Checkbox items under `### Security Checklist`."""

    def test_items_after_prose(self):
        text = (
            "## Security\n"
            "### Security Checklist\n"
            "Before committing:\n"
            "\n"
            "- [ ] No secrets\n"
            "- [x] Inputs validated\n"
            "\n"
            "- [ ] after gap\n"
        )

        assert extract_security_checklist(text) == ["No secrets", "Inputs validated"]

    def test_no_checklist_heading(self):
        assert extract_security_checklist("- [ ] orphan\n") == []

    def test_heading_before_items_ends_search(self):
        text = "### Security Checklist\n## Next\n- [ ] x\n"

        assert extract_security_checklist(text) == []


class TestLineBreaks:
    """Only `\\n` ends a line."""

    def test_form_feed_does_not_start_a_section(self):
        sections = extract_sections("intro\x0c## Fake\nbody\n")

        assert list(sections) == [PREAMBLE_KEY]

    @pytest.mark.parametrize("text", [
        "## A\u2028B\nbody\n",
        "intro\x1c\x1d\x1e\x85\n## Real\u2029\nx\n",
    ])
    def test_round_trip_with_unicode_separators(self, text):
        assert join_sections(split_sections(text)) == text

    def test_heading_keeps_line_separator(self):
        assert "A\u2028B" in extract_sections("## A\u2028B\nbody\n")

    def test_checklist_ignores_form_feed(self):
        text = "### Security Checklist\n- [ ] one\x0c- [ ] still one\n- [x] two\n"

        assert extract_security_checklist(text) == ["one\x0c- [ ] still one", "two"]
