"""
核心扫描函数

对一段文本执行固定的规则组合，返回结构化、有序、不可变的扫描报告。
纯函数：不访问文件系统、网络或环境变量。
"""

import logging
import re
from pathlib import PurePosixPath
from typing import Optional, Union

from guvnr.core.scanner.models import (
    FileKind,
    Location,
    ScanFinding,
    ScanMode,
    ScanReport,
)
from guvnr.core.scanner.patterns import (
    ANSI_CSI,
    ANSI_OSC,
    CONTROL_CHARS,
    EXCERPT_MAX_LENGTH,
    EXTENSION_TO_KIND,
    RULES,
    SUPPRESSED_FILE_NAME,
    SUPPRESSED_PATH_SEGMENTS,
    SUPPRESSION_LINE_MARKER,
    TRUNCATION_MARKER,
    PatternRule,
)
from guvnr.errors import ScanContractError

logger = logging.getLogger(__name__)


def _coerce_kind(file_kind: Union[FileKind, str]) -> FileKind:
    try:
        return FileKind(file_kind)
    except ValueError:
        valid = ", ".join(k.value for k in FileKind)
        raise ScanContractError(f"Invalid file kind: {file_kind!r} (expected one of: {valid})")


def _coerce_mode(mode: Union[ScanMode, str]) -> ScanMode:
    try:
        return ScanMode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in ScanMode)
        raise ScanContractError(f"Invalid scan mode: {mode!r} (expected one of: {valid})")


def sanitize_excerpt(line: str, max_length: int = EXCERPT_MAX_LENGTH) -> str:
    """
    清洗摘录文本，防止终端/日志注入

    顺序：先移除 ANSI CSI 与 OSC 转义序列，再移除 0x00-0x1F 和 0x7F
    控制字符，最后截断到 max_length 并追加截断标记。

    Args:
        line: 原始行
        max_length: 最大长度（不含截断标记）

    Returns:
        清洗后的字符串
    """
    cleaned = ANSI_OSC.sub('', line)
    cleaned = ANSI_CSI.sub('', cleaned)
    cleaned = CONTROL_CHARS.sub('', cleaned)
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length] + TRUNCATION_MARKER
    return cleaned


def redact_span(line: str, start: int, end: int, keep: int = 4) -> str:
    """将 [start, end) 区间替换为保留前 keep 个字符的打码文本"""
    secret = line[start:end]
    if len(secret) <= keep:
        return line[:start] + '*' * len(secret) + line[end:]
    return line[:start] + secret[:keep] + '*' * min(len(secret) - keep, 8) + line[end:]


def is_suppressed_source(source: Optional[str]) -> bool:
    """
    判断来源路径是否属于测试夹具、示例或文档

    Args:
        source: 相对路径标签（不会被打开）

    Returns:
        是否应抑制可抑制类别
    """
    if not source:
        return False
    path = PurePosixPath(source.replace("\\", "/"))
    if any(part.lower() in SUPPRESSED_PATH_SEGMENTS for part in path.parts[:-1]):
        return True
    return bool(SUPPRESSED_FILE_NAME.match(path.name))


def kind_for_path(path: str) -> Optional[FileKind]:
    """根据扩展名推断文件类型，未知返回 None"""
    return EXTENSION_TO_KIND.get(PurePosixPath(path.replace("\\", "/")).suffix.lower())


def _match_line(rule: PatternRule, line: str) -> Optional[re.Match]:
    # 同一行同一类别只报告最靠前的一次命中
    best: Optional[re.Match] = None
    for pattern in rule.patterns:
        match = pattern.search(line)
        if match and (best is None or match.start() < best.start()):
            best = match
    return best


def _secret_span(match: re.Match) -> tuple[int, int]:
    if "secret" in match.re.groupindex:
        return match.span("secret")
    return match.span()


def scan(
    text: str,
    file_kind: Union[FileKind, str],
    mode: Union[ScanMode, str] = ScanMode.BASIC,
    source: Optional[str] = None,
) -> ScanReport:
    """
    扫描文本

    规则按声明顺序执行，同一类别内按行号排序。一行可以同时命中多个类别。
    eval 与厂商密钥不受上下文抑制；凭据与注入类启发式在测试、示例、
    文档上下文中被抑制。

    Args:
        text: 待扫描文本（文件内容或 diff 的新增行）
        file_kind: 文件类型
        mode: 扫描模式
        source: 可选的来源路径标签，仅用于抑制判断

    Returns:
        ScanReport 对象

    Raises:
        ScanContractError: file_kind 或 mode 不是合法枚举值
    """
    kind = _coerce_kind(file_kind)
    scan_mode = _coerce_mode(mode)

    if not text:
        return ScanReport()
    if '\x00' in text:
        logger.debug(f"Binary content in {source or '<text>'}, skipping")
        return ScanReport()

    lines = text.split('\n')
    source_suppressed = kind == FileKind.MARKDOWN or is_suppressed_source(source)
    marked = [bool(SUPPRESSION_LINE_MARKER.search(line)) for line in lines]

    findings: list[ScanFinding] = []
    for rule in RULES:
        if not rule.enabled(kind, scan_mode):
            continue
        if rule.suppressible and source_suppressed:
            continue

        for line_num, line in enumerate(lines, 1):
            if rule.suppressible and marked[line_num - 1]:
                continue
            match = _match_line(rule, line)
            if match is None:
                continue

            shown = redact_span(line, *_secret_span(match)) if rule.secret else line
            findings.append(ScanFinding(
                category=rule.category,
                severity=rule.severity,
                location=Location(line=line_num, column=match.start()),
                excerpt=sanitize_excerpt(shown),
                pattern=rule.name,
            ))

    return ScanReport(findings=tuple(findings))
