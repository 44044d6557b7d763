"""
环境诊断

检查运行环境与项目安装状态。所有诊断都是建议性的：
失败只影响输出，不影响退出码。
"""

import logging
import shutil
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import git
from git.exc import GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError

from guvnr.config import find_config_file

logger = logging.getLogger(__name__)

MIN_PYTHON = (3, 10)
FRESHNESS_DAYS = 7
SECONDS_PER_DAY = 60 * 60 * 24

CATEGORY_ORDER: tuple[str, ...] = ("environment", "tools", "framework", "health")


@dataclass(frozen=True)
class Diagnostic:
    """
    单项诊断结果

    Attributes:
        id: 诊断 ID
        name: 可读名称
        category: 分组（environment, tools, framework, health）
        passed: 是否通过
        value: 观测到的值（版本号、状态描述）
        hint: 未通过时的提示
        required: 要求的版本或状态
    """
    id: str
    name: str
    category: str
    passed: bool
    value: str
    hint: Optional[str] = None
    required: Optional[str] = None


@dataclass(frozen=True)
class _Outcome:
    passed: bool
    value: str
    hint: Optional[str] = None
    required: Optional[str] = None


def check_python_version(root: Path) -> _Outcome:
    info = sys.version_info
    required = ">=" + ".".join(str(p) for p in MIN_PYTHON)
    return _Outcome(
        passed=(info.major, info.minor) >= MIN_PYTHON,
        value=f"{info.major}.{info.minor}.{info.micro}",
        required=required,
    )


def check_git_available(root: Path) -> _Outcome:
    try:
        version = git.Git().version_info
    except GitCommandNotFound:
        return _Outcome(passed=False, value="Not found", hint="Install git")
    return _Outcome(passed=True, value=".".join(str(p) for p in version))


def check_pre_commit_available(root: Path) -> _Outcome:
    path = shutil.which("pre-commit")
    if path is None:
        return _Outcome(passed=False, value="Not installed", hint="Run: pip install pre-commit")
    return _Outcome(passed=True, value=path)


def check_framework_installed(root: Path) -> _Outcome:
    has_context = find_config_file(root) is not None or (root / "CLAUDE.md").is_file()
    has_commands = (root / ".claude" / "commands").is_dir()
    if has_context and has_commands:
        return _Outcome(passed=True, value="Yes")
    hint = None
    if not has_context:
        hint = "Add guvnr.yaml or CLAUDE.md"
    elif not has_commands:
        hint = "Create .claude/commands/"
    return _Outcome(passed=False, value="Partial" if has_context or has_commands else "No", hint=hint)


def check_pre_commit_hook(root: Path) -> _Outcome:
    try:
        repo = git.Repo(root, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return _Outcome(passed=False, value="Not a git repository")

    hook = Path(repo.git_dir) / "hooks" / "pre-commit"
    if not hook.is_file():
        return _Outcome(passed=False, value="Not installed", hint="Run: pre-commit install")
    return _Outcome(passed=True, value="Installed")


def make_freshness_check(now: Callable[[], float] = time.time) -> Callable[[Path], _Outcome]:
    def check_claude_md_freshness(root: Path) -> _Outcome:
        path = root / "CLAUDE.md"
        if not path.is_file():
            return _Outcome(passed=False, value="Not found", hint="Create CLAUDE.md")
        days = (now() - path.stat().st_mtime) / SECONDS_PER_DAY
        return _Outcome(
            passed=days < FRESHNESS_DAYS,
            value=f"{int(days)} days old",
            hint="Consider updating the Current State section" if days >= FRESHNESS_DAYS else None,
        )
    return check_claude_md_freshness


# (id, name, category, check)
DIAGNOSTICS: tuple[tuple[str, str, str, Callable[[Path], _Outcome]], ...] = (
    ("python-version", "Python version", "environment", check_python_version),
    ("git-available", "Git available", "environment", check_git_available),
    ("pre-commit-available", "pre-commit available", "tools", check_pre_commit_available),
    ("framework-installed", "Framework installed", "framework", check_framework_installed),
    ("pre-commit-hooks", "Pre-commit hooks installed", "framework", check_pre_commit_hook),
    ("claude-md-freshness", "CLAUDE.md freshness", "health", make_freshness_check()),
)


def run_diagnostics(
    root: Path,
    diagnostics: Optional[tuple[tuple[str, str, str, Callable[[Path], _Outcome]], ...]] = None,
) -> list[Diagnostic]:
    """
    执行全部诊断

    单项诊断抛出异常时记为未通过，value 为 "Error"，提示中带上异常信息。

    Args:
        root: 项目根目录
        diagnostics: 诊断表，默认使用 DIAGNOSTICS

    Returns:
        按声明顺序排列的 Diagnostic 列表
    """
    results: list[Diagnostic] = []
    for diag_id, name, category, check in diagnostics or DIAGNOSTICS:
        try:
            outcome = check(root)
        except Exception as e:
            logger.debug(f"Diagnostic {diag_id} raised: {e}")
            outcome = _Outcome(passed=False, value="Error", hint=str(e))
        results.append(Diagnostic(
            id=diag_id,
            name=name,
            category=category,
            passed=outcome.passed,
            value=outcome.value,
            hint=outcome.hint,
            required=outcome.required,
        ))
    return results
