"""
Markdown 解析器模块 - 解析 CLAUDE.md 等上下文文件的标题结构

使用 markdown-it-py 进行 token 解析。
与 sections 模块的逐行切分不同，这里会正确跳过代码块里的 `#` 行，
因此用于标题检测和结构校验。
"""

from dataclasses import dataclass, field
from typing import Optional

from markdown_it import MarkdownIt


@dataclass
class Header:
    """
    标题数据模型

    Attributes:
        level: 标题级别 (1-6)
        text: 标题文本
        line_number: 在原文件中的行号
    """
    level: int
    text: str
    line_number: int


@dataclass
class ParsedMarkdown:
    """解析后的 Markdown：按文档顺序排列的标题"""
    headers: list[Header] = field(default_factory=list)
    raw_content: str = ""

    @property
    def title(self) -> Optional[str]:
        """第一个一级标题"""
        for header in self.headers:
            if header.level == 1:
                return header.text
        return None

    def headings(self, level: int) -> list[str]:
        return [h.text for h in self.headers if h.level == level]


def parse_markdown(content: str) -> ParsedMarkdown:
    """
    解析 Markdown 内容

    Args:
        content: Markdown 内容

    Returns:
        ParsedMarkdown 对象
    """
    tokens = MarkdownIt().parse(content)
    headers: list[Header] = []

    for i, token in enumerate(tokens):
        if token.type != 'heading_open':
            continue
        # 下一个 token 是 inline，包含标题文本
        if i + 1 < len(tokens) and tokens[i + 1].type == 'inline':
            headers.append(Header(
                level=int(token.tag[1]),  # h2 -> 2
                text=tokens[i + 1].content or "",
                line_number=token.map[0] + 1 if token.map else 1,
            ))

    return ParsedMarkdown(headers=headers, raw_content=content)
