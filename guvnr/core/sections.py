"""
Markdown 章节提取器

按二级标题（`## `）切分 Markdown 文本。逐行处理而不走完整的
Markdown 解析，以保证切分结果可以无损拼回原文：

    preamble + Σ("## " + heading + "\\n" + body) == text

三级及更深的标题属于正文。标题 key 区分大小写。
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

PREAMBLE_KEY = "_preamble"

# 二级标题：恰好两个 #，后跟一个空格
HEADING_PATTERN = re.compile(r'^## (.+)$')

# 技术栈条目：- Label: value / - **Label**: value / - **Label:** value
TECH_STACK_PATTERN = re.compile(
    r'^\s*[-*]\s+(?:\*\*)?(?P<label>[^*:\[\]]+?)(?:\*\*)?\s*:\s*(?:\*\*)?\s*(?P<value>.+?)\s*$'
)

CHECKBOX_PATTERN = re.compile(r'^\s*[-*]\s+\[(?P<mark>[ xX])\]\s+(?P<label>.+?)\s*$')
SECURITY_CHECKLIST_HEADING = re.compile(r'^###\s+Security Checklist\s*$')
ANY_HEADING = re.compile(r'^#{1,6}\s')

# 只按 \n 断行；str.splitlines 还会在 \x0c、U+2028 等字符处断开
LINE_BREAK = re.compile(r'(?<=\n)')


@dataclass(frozen=True)
class MarkdownSection:
    """
    一个二级章节

    Attributes:
        heading: `## ` 之后的原样文本（不含换行）
        body: 到下一个二级标题或文末为止的原始文本
    """
    heading: str
    body: str

    def render(self) -> str:
        if self.heading == PREAMBLE_KEY:
            return self.body
        return f"## {self.heading}\n{self.body}"


@dataclass(frozen=True)
class TechStackItem:
    """技术栈条目，如 `- **Language**: Python 3.12`"""
    category: str
    value: str


def _lines(text: str) -> list[str]:
    """按换行符切分，保留行尾的换行符"""
    lines = LINE_BREAK.split(text)
    if lines and not lines[-1]:
        lines.pop()
    return lines


def _heading_of(line: str) -> Optional[str]:
    match = HEADING_PATTERN.match(line.rstrip('\r\n'))
    if match:
        return match.group(1)
    return None


def split_sections(text: str) -> list[MarkdownSection]:
    """
    将文本切分为有序章节列表

    第一个元素总是 `_preamble`（可能为空）。重复标题全部保留。

    Args:
        text: Markdown 原文

    Returns:
        MarkdownSection 列表
    """
    sections: list[MarkdownSection] = []
    heading = PREAMBLE_KEY
    body: list[str] = []

    for line in _lines(text):
        found = _heading_of(line)
        if found is None:
            body.append(line)
            continue
        sections.append(MarkdownSection(heading=heading, body="".join(body)))
        heading = found
        body = []

    sections.append(MarkdownSection(heading=heading, body="".join(body)))
    return sections


def join_sections(sections: Iterable[MarkdownSection]) -> str:
    """split_sections 的逆操作"""
    return "".join(section.render() for section in sections)


def extract_sections(text: str) -> dict[str, MarkdownSection]:
    """
    提取章节映射

    标题重复时保留第一次出现的章节。查询不存在的标题请使用
    `.get()`，不会抛出异常。

    Args:
        text: Markdown 原文

    Returns:
        按出现顺序排列的 {heading: MarkdownSection}
    """
    result: dict[str, MarkdownSection] = {}
    for section in split_sections(text):
        result.setdefault(section.heading, section)
    return result


def extract_tech_stack(body: str) -> list[TechStackItem]:
    """
    从章节正文中提取技术栈列表

    只识别 `- <label>: <value>` 形式的行（label 可加粗），
    复选框和其他行一律跳过。
    """
    items: list[TechStackItem] = []
    for line in body.split("\n"):
        if CHECKBOX_PATTERN.match(line):
            continue
        match = TECH_STACK_PATTERN.match(line)
        if not match:
            continue
        value = match.group("value").strip()
        if not value:
            continue
        items.append(TechStackItem(
            category=match.group("label").strip(),
            value=value,
        ))
    return items


def extract_security_checklist(text: str) -> list[str]:
    """
    提取 `### Security Checklist` 下的复选框条目

    从第一个该标题开始，跳过说明文字和空行直到第一个复选框；
    之后收集连续的复选框条目，遇到其他行即结束。在找到第一个
    条目之前遇到新的标题则返回空列表。

    Args:
        text: Markdown 原文（整篇或某个章节正文）

    Returns:
        去掉复选框标记后的条目文本
    """
    lines = text.split("\n")
    start = next(
        (i for i, line in enumerate(lines) if SECURITY_CHECKLIST_HEADING.match(line)),
        None,
    )
    if start is None:
        return []

    items: list[str] = []
    for line in lines[start + 1:]:
        match = CHECKBOX_PATTERN.match(line)
        if match:
            items.append(match.group("label"))
            continue
        if items:
            break
        if ANY_HEADING.match(line):
            break
    return items
