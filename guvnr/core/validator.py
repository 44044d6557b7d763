"""
核心验证器模块 - 校验项目的 AI 助手配置

只读检查，不修改任何文件：
1. guvnr.yaml：存在、可解析、包含 project.name 与 version
2. .claude/ 目录：commands 与 agents
3. .pre-commit-config.yaml：存在与基本 YAML 健全性
4. .gitignore：存在，并忽略 .tmp/ 与 .secrets.baseline
5. CLAUDE.md：存在、结构完整、不含密钥
6. docs/session-notes/ 目录
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Literal, Optional

import pathspec
import yaml

from guvnr.config import find_config_file
from guvnr.core.parser import parse_markdown
from guvnr.core.scanner import FileKind, ScanMode, Severity, scan

logger = logging.getLogger(__name__)

SeverityName = Literal["error", "warning", "info"]

CLAUDE_MD = "CLAUDE.md"
PRE_COMMIT_CONFIG = ".pre-commit-config.yaml"
GITIGNORE = ".gitignore"

# CLAUDE.md 必须包含的二级章节
REQUIRED_CLAUDE_SECTIONS: tuple[str, ...] = ("Overview", "Tech Stack", "Current State")

LEADING_SPACES = re.compile(r'^( *)')


@dataclass
class Issue:
    """
    检查问题

    Attributes:
        severity: 严重程度 (error, warning, info)
        code: 规则 ID (如 config-exists)
        message: 问题描述
        file_path: 相关文件路径
        line_number: 行号（0 表示整个文件）
        suggestion: 修复建议
    """
    severity: SeverityName
    code: str
    message: str
    file_path: str
    line_number: int = 0
    suggestion: Optional[str] = None


@dataclass
class ValidationResult:
    """
    验证结果

    Attributes:
        issues: 未通过规则产生的问题
        passed_rules: 通过的规则 ID
        stats: 统计信息
    """
    issues: list[Issue] = field(default_factory=list)
    passed_rules: list[str] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)

    def by_severity(self, severity: SeverityName) -> list[Issue]:
        return [i for i in self.issues if i.severity == severity]

    @property
    def errors(self) -> list[Issue]:
        return self.by_severity("error")

    @property
    def warnings(self) -> list[Issue]:
        return self.by_severity("warning")

    @property
    def info(self) -> list[Issue]:
        return self.by_severity("info")

    @property
    def passed(self) -> bool:
        return not self.errors

    def update_stats(self, total_rules: int) -> None:
        self.stats = {
            "total_rules": total_rules,
            "passed": len(self.passed_rules),
            "total_issues": len(self.issues),
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "info": len(self.info),
        }


@dataclass(frozen=True)
class YamlCheck:
    """
    基本 YAML 健全性检查结果

    Attributes:
        errors: 会导致解析失败的问题（制表符、缺少 repos:、空文件）
        warnings: 可能有问题但不阻断（奇数缩进，只报告第一处）
        warning_line: 第一处奇数缩进所在行号
    """
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    warning_line: int = 0

    @property
    def has_critical_errors(self) -> bool:
        return bool(self.errors)

    @property
    def valid(self) -> bool:
        return not self.errors and not self.warnings


def validate_basic_yaml(content: str) -> YamlCheck:
    """
    对 pre-commit 配置做不依赖完整解析的健全性检查

    Args:
        content: 文件内容

    Returns:
        YamlCheck 对象
    """
    errors: list[str] = []
    warnings: list[str] = []
    warning_line = 0

    if '\t' in content:
        errors.append("YAML file contains tabs (use spaces for indentation)")

    if 'repos:' not in content:
        errors.append('Missing required "repos:" key in pre-commit config')

    for i, line in enumerate(content.split('\n'), 1):
        spaces = len(LEADING_SPACES.match(line).group(1))
        if spaces % 2 != 0 and not line.strip().startswith('#'):
            warnings.append(
                f"Line {i}: Odd indentation ({spaces} spaces) may cause YAML parsing issues"
            )
            warning_line = i
            break

    if not content.strip():
        errors.append("YAML file is empty")

    return YamlCheck(errors=tuple(errors), warnings=tuple(warnings), warning_line=warning_line)


@dataclass(frozen=True)
class Rule:
    """
    单条校验规则

    Attributes:
        id: 规则 ID
        name: 可读名称
        category: 分组（core, commands, security, workflow, agents）
        severity: 未通过时的严重程度
        suggestion: 默认修复建议
    """
    id: str
    name: str
    category: str
    severity: SeverityName
    suggestion: Optional[str] = None


RULES: tuple[Rule, ...] = (
    Rule("config-exists", "guvnr.yaml exists", "core", "error",
         "Create guvnr.yaml with 'version' and 'project.name'"),
    Rule("config-valid-yaml", "guvnr.yaml is valid YAML", "core", "error",
         "Fix the YAML syntax in guvnr.yaml"),
    Rule("config-has-project", "guvnr.yaml has project name", "core", "warning",
         "Add 'project:' with a 'name:' key"),
    Rule("config-has-version", "guvnr.yaml has version field", "core", "warning",
         "Add 'version: \"1.0\"'"),
    Rule("commands-dir", ".claude/commands directory exists", "commands", "info",
         "mkdir -p .claude/commands"),
    Rule("plan-command-exists", "/plan command exists", "commands", "warning",
         "Add .claude/commands/plan.md"),
    Rule("verify-command-exists", "/verify command exists", "commands", "warning",
         "Add .claude/commands/verify.md"),
    Rule("agents-dir", ".claude/agents directory exists", "agents", "info",
         "mkdir -p .claude/agents"),
    Rule("pre-commit-config", "Pre-commit configuration exists", "security", "info",
         "Add a .pre-commit-config.yaml"),
    Rule("pre-commit-yaml", "Pre-commit configuration is well-formed", "security", "error",
         "Use spaces for indentation and declare a top-level 'repos:' key"),
    Rule("gitignore-exists", ".gitignore exists", "security", "warning",
         "Create a .gitignore"),
    Rule("gitignore-tmp", ".gitignore ignores .tmp/", "security", "warning",
         "Add '.tmp/' to .gitignore"),
    Rule("gitignore-secrets-baseline", ".gitignore ignores .secrets.baseline", "security", "info",
         "Add '.secrets.baseline' to .gitignore"),
    Rule("claude-md-exists", "CLAUDE.md exists", "context", "warning",
         "Create CLAUDE.md describing the project for AI assistants"),
    Rule("claude-md-structure", "CLAUDE.md has title and core sections", "context", "warning",
         "Add a '# Title' and '## Overview', '## Tech Stack', '## Current State' sections"),
    Rule("claude-md-secrets", "No hardcoded secrets in CLAUDE.md", "security", "error",
         "Remove the secret from CLAUDE.md and rotate it"),
    Rule("session-notes-dir", "Session notes directory exists", "workflow", "info",
         "mkdir -p docs/session-notes"),
    Rule("tmp-dir-exists", ".tmp directory exists", "workflow", "info",
         "mkdir -p .tmp"),
)


class Validator:
    """验证器"""

    def __init__(self, repo_path: Path):
        """
        初始化验证器

        Args:
            repo_path: 项目根目录
        """
        self.repo_path = repo_path
        self._checks: dict[str, Callable[[Rule], list[Issue]]] = {
            "config-exists": self.check_config_exists,
            "config-valid-yaml": self.check_config_valid_yaml,
            "config-has-project": self.check_config_has_project,
            "config-has-version": self.check_config_has_version,
            "commands-dir": lambda rule: self._check_dir(rule, ".claude/commands"),
            "plan-command-exists": lambda rule: self._check_file(rule, ".claude/commands/plan.md"),
            "verify-command-exists": lambda rule: self._check_file(rule, ".claude/commands/verify.md"),
            "agents-dir": lambda rule: self._check_dir(rule, ".claude/agents"),
            "pre-commit-config": lambda rule: self._check_file(rule, PRE_COMMIT_CONFIG),
            "pre-commit-yaml": self.check_pre_commit_yaml,
            "gitignore-exists": lambda rule: self._check_file(rule, GITIGNORE),
            "gitignore-tmp": lambda rule: self._check_ignored(rule, ".tmp/session.md"),
            "gitignore-secrets-baseline": lambda rule: self._check_ignored(rule, ".secrets.baseline"),
            "claude-md-exists": lambda rule: self._check_file(rule, CLAUDE_MD),
            "claude-md-structure": self.check_claude_md_structure,
            "claude-md-secrets": self.check_claude_md_secrets,
            "session-notes-dir": lambda rule: self._check_dir(rule, "docs/session-notes"),
            "tmp-dir-exists": lambda rule: self._check_dir(rule, ".tmp"),
        }

    # ---- 辅助 ----

    def _issue(self, rule: Rule, message: str, file_path: str,
               line_number: int = 0, severity: Optional[SeverityName] = None) -> Issue:
        return Issue(
            severity=severity or rule.severity,
            code=rule.id,
            message=message,
            file_path=file_path,
            line_number=line_number,
            suggestion=rule.suggestion,
        )

    def _read(self, relative: str) -> Optional[str]:
        path = self.repo_path / relative
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def _config_path(self) -> Optional[Path]:
        return find_config_file(self.repo_path)

    def _load_config_data(self) -> tuple[Optional[Path], object]:
        """返回 (路径, safe_load 结果)；解析失败时抛出 yaml.YAMLError"""
        path = self._config_path()
        if path is None:
            return None, None
        return path, yaml.safe_load(path.read_text(encoding="utf-8"))

    def _check_file(self, rule: Rule, relative: str) -> list[Issue]:
        if (self.repo_path / relative).is_file():
            return []
        return [self._issue(rule, f"{relative} not found", relative)]

    def _check_dir(self, rule: Rule, relative: str) -> list[Issue]:
        if (self.repo_path / relative).is_dir():
            return []
        return [self._issue(rule, f"{relative}/ directory not found", relative)]

    def _check_ignored(self, rule: Rule, sample_path: str) -> list[Issue]:
        content = self._read(GITIGNORE)
        if content is None:
            # gitignore-exists 负责报告缺失
            return []
        spec = pathspec.PathSpec.from_lines("gitwildmatch", content.splitlines())
        if spec.match_file(sample_path):
            return []
        return [self._issue(rule, f"{GITIGNORE} does not ignore {sample_path}", GITIGNORE)]

    # ---- guvnr.yaml ----

    def check_config_exists(self, rule: Rule) -> list[Issue]:
        if self._config_path() is not None:
            return []
        return [self._issue(rule, "guvnr.yaml not found", "guvnr.yaml")]

    def check_config_valid_yaml(self, rule: Rule) -> list[Issue]:
        try:
            self._load_config_data()
        except yaml.YAMLError as e:
            line = 0
            mark = getattr(e, "problem_mark", None)
            if mark is not None:
                line = mark.line + 1
            path = self._config_path()
            return [self._issue(rule, f"Invalid YAML: {e}", path.name if path else "guvnr.yaml", line)]
        return []

    def _config_mapping(self) -> tuple[Optional[Path], Optional[dict]]:
        try:
            path, data = self._load_config_data()
        except yaml.YAMLError:
            # config-valid-yaml 负责报告语法错误
            return self._config_path(), {}
        if path is None:
            return None, None
        return path, data if isinstance(data, dict) else {}

    def check_config_has_project(self, rule: Rule) -> list[Issue]:
        path, data = self._config_mapping()
        if path is None:
            return []
        project = data.get("project")
        if isinstance(project, dict) and project.get("name"):
            return []
        return [self._issue(rule, "project.name is not set", path.name)]

    def check_config_has_version(self, rule: Rule) -> list[Issue]:
        path, data = self._config_mapping()
        if path is None:
            return []
        if data.get("version"):
            return []
        return [self._issue(rule, "version is not set", path.name)]

    # ---- pre-commit ----

    def check_pre_commit_yaml(self, rule: Rule) -> list[Issue]:
        content = self._read(PRE_COMMIT_CONFIG)
        if content is None:
            return []
        result = validate_basic_yaml(content)
        issues = [self._issue(rule, message, PRE_COMMIT_CONFIG) for message in result.errors]
        issues.extend(
            self._issue(rule, message, PRE_COMMIT_CONFIG, result.warning_line, severity="warning")
            for message in result.warnings
        )
        return issues

    # ---- CLAUDE.md ----

    def check_claude_md_structure(self, rule: Rule) -> list[Issue]:
        content = self._read(CLAUDE_MD)
        if content is None:
            return []
        parsed = parse_markdown(content)
        issues: list[Issue] = []
        if parsed.title is None:
            issues.append(self._issue(rule, "CLAUDE.md has no top-level '# ' title", CLAUDE_MD, 1))
        present = set(parsed.headings(2))
        for section in REQUIRED_CLAUDE_SECTIONS:
            if section not in present:
                issues.append(self._issue(rule, f"CLAUDE.md is missing '## {section}' section", CLAUDE_MD))
        return issues

    def check_claude_md_secrets(self, rule: Rule) -> list[Issue]:
        content = self._read(CLAUDE_MD)
        if content is None:
            return []
        report = scan(content, FileKind.MARKDOWN, ScanMode.BASIC, source=CLAUDE_MD)
        return [
            self._issue(rule, f"Possible secret ({f.category.value})", CLAUDE_MD, f.location.line)
            for f in report.findings
            if f.severity == Severity.ERROR
        ]

    # ---- 入口 ----

    def validate_all(self) -> ValidationResult:
        """
        按声明顺序执行全部规则

        单条规则读取文件失败时记为该规则的 error，不中断其余规则。

        Returns:
            ValidationResult 对象
        """
        result = ValidationResult()
        for rule in RULES:
            try:
                issues = self._checks[rule.id](rule)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Rule {rule.id} failed: {e}")
                issues = [self._issue(rule, f"Check failed: {e}", str(self.repo_path), severity="error")]

            if issues:
                result.issues.extend(issues)
            else:
                result.passed_rules.append(rule.id)

        result.update_stats(len(RULES))
        return result
