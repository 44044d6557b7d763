"""Shared fixtures."""

from pathlib import Path

import pytest
from git import Repo

CLAUDE_MD = """# Project: Acme API

Internal service for order processing.

## Overview
Acme API accepts orders and publishes events.

## Tech Stack
- **Language**: Python 3.12
- **Framework**: FastAPI
- Database: PostgreSQL

## Current State
Phase 2, payments integration.

### Security Checklist
Before each commit:

- [ ] No secrets in code
- [x] Inputs validated

## Session Instructions
Read docs/session-notes first.
"""

PRE_COMMIT = """repos:
  - repo: https://github.com/pre-commit/pre-commit-hooks
    rev: v5.0.0
    hooks:
      - id: check-yaml
"""


@pytest.fixture
def good_project(tmp_path: Path) -> Path:
    """A project that passes every validation rule."""
    (tmp_path / "guvnr.yaml").write_text('version: "1.0"\nproject:\n  name: acme\n', encoding="utf-8")
    (tmp_path / ".claude" / "commands").mkdir(parents=True)
    for command in ("plan.md", "verify.md"):
        (tmp_path / ".claude" / "commands" / command).write_text(f"# {command}\n", encoding="utf-8")
    (tmp_path / ".claude" / "agents").mkdir(parents=True)
    (tmp_path / ".pre-commit-config.yaml").write_text(PRE_COMMIT, encoding="utf-8")
    (tmp_path / ".gitignore").write_text(".tmp/\n.secrets.baseline\n", encoding="utf-8")
    (tmp_path / "CLAUDE.md").write_text(CLAUDE_MD, encoding="utf-8")
    (tmp_path / "docs" / "session-notes").mkdir(parents=True)
    (tmp_path / ".tmp").mkdir()
    return tmp_path


@pytest.fixture
def git_repo(tmp_path: Path) -> Repo:
    """An empty git repository with no commits."""
    return Repo.init(tmp_path)


@pytest.fixture
def stage(git_repo: Repo):
    """Write a file into the repository and add it to the index."""
    def _stage(relative: str, content: str) -> None:
        path = Path(git_repo.working_tree_dir) / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        git_repo.index.add([relative])
        git_repo.index.write()
    return _stage
