"""
Core Layer - 核心层

纯函数组件：模式扫描器、Markdown 章节提取器与上下文解析。
不做任何 I/O，也不持有状态。
"""

from guvnr.core.parser import (
    parse_markdown,
    Header,
    ParsedMarkdown,
)
from guvnr.core.sections import (
    PREAMBLE_KEY,
    MarkdownSection,
    TechStackItem,
    extract_sections,
    split_sections,
    join_sections,
    extract_tech_stack,
    extract_security_checklist,
)
from guvnr.core.context import (
    ProjectContext,
    parse_project_context,
)
from guvnr.core.scanner import (
    scan,
    sanitize_excerpt,
    FileKind,
    ScanMode,
    Severity,
    Category,
    ScanFinding,
    ScanReport,
)

__all__ = [
    # parser
    "parse_markdown",
    "Header",
    "ParsedMarkdown",
    # sections
    "PREAMBLE_KEY",
    "MarkdownSection",
    "TechStackItem",
    "extract_sections",
    "split_sections",
    "join_sections",
    "extract_tech_stack",
    "extract_security_checklist",
    # context
    "ProjectContext",
    "parse_project_context",
    # scanner
    "scan",
    "sanitize_excerpt",
    "FileKind",
    "ScanMode",
    "Severity",
    "Category",
    "ScanFinding",
    "ScanReport",
]
