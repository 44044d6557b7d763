"""
项目上下文解析

把 CLAUDE.md 解析为结构化的 ProjectContext，供 `guvnr context`
命令输出，也被结构校验规则复用。
"""

import re
from dataclasses import asdict, dataclass, field
from typing import Any

from guvnr.core.parser import parse_markdown
from guvnr.core.sections import (
    TechStackItem,
    extract_sections,
    extract_security_checklist,
    extract_tech_stack,
)

PROJECT_PREFIX = re.compile(r'^Project:\s*', re.IGNORECASE)

# ProjectContext 字段 -> CLAUDE.md 二级标题
SECTION_FIELDS: dict[str, str] = {
    "overview": "Overview",
    "architecture": "Architecture",
    "conventions": "Conventions",
    "commands": "Common Commands",
    "current_state": "Current State",
    "session_instructions": "Session Instructions",
}


@dataclass
class ProjectContext:
    """
    CLAUDE.md 的结构化视图

    Attributes:
        project_name: 第一个一级标题（去掉 `Project:` 前缀）
        overview: Overview 章节正文
        tech_stack: Tech Stack 章节中的条目
        architecture: Architecture 章节正文
        conventions: Conventions 章节正文
        commands: Common Commands 章节正文
        current_state: Current State 章节正文
        session_instructions: Session Instructions 章节正文
        security_checklist: Security Checklist 下的条目
    """
    project_name: str = ""
    overview: str = ""
    tech_stack: list[TechStackItem] = field(default_factory=list)
    architecture: str = ""
    conventions: str = ""
    commands: str = ""
    current_state: str = ""
    session_instructions: str = ""
    security_checklist: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def parse_project_context(text: str) -> ProjectContext:
    """
    解析 CLAUDE.md

    缺失的章节为空字符串，缺失的列表为空列表，不会抛出异常。

    Args:
        text: CLAUDE.md 原文

    Returns:
        ProjectContext 对象
    """
    parsed = parse_markdown(text)
    sections = extract_sections(text)

    context = ProjectContext()
    title = parsed.title
    if title:
        context.project_name = PROJECT_PREFIX.sub('', title).strip()

    for attr, heading in SECTION_FIELDS.items():
        section = sections.get(heading)
        if section is not None:
            setattr(context, attr, section.body.strip())

    tech = sections.get("Tech Stack")
    if tech is not None:
        context.tech_stack = extract_tech_stack(tech.body)

    context.security_checklist = extract_security_checklist(text)
    return context
