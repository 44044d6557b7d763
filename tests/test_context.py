"""Tests for CLAUDE.md project context parsing."""

from conftest import CLAUDE_MD

from guvnr.core.context import ProjectContext, parse_project_context
from guvnr.core.sections import TechStackItem


def test_parse_full_document():
    context = parse_project_context(CLAUDE_MD)

    assert context.project_name == "Acme API"
    assert context.overview == "Acme API accepts orders and publishes events."
    assert context.tech_stack == [
        TechStackItem("Language", "Python 3.12"),
        TechStackItem("Framework", "FastAPI"),
        TechStackItem("Database", "PostgreSQL"),
    ]
    assert context.current_state.startswith("Phase 2, payments integration.")
    assert context.security_checklist == ["No secrets in code", "Inputs validated"]
    assert context.session_instructions == "Read docs/session-notes first."
    assert context.architecture == ""


def test_title_inside_code_fence_is_ignored():
    text = "```\n# not a title\n```\n\n# Real Name\n"

    assert parse_project_context(text).project_name == "Real Name"


def test_empty_document_gives_defaults():
    assert parse_project_context("") == ProjectContext()


def test_to_dict_is_serialisable():
    data = parse_project_context(CLAUDE_MD).to_dict()

    assert data["tech_stack"][0] == {"category": "Language", "value": "Python 3.12"}
