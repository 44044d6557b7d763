"""
暂存区 diff 读取

通过 GitPython 执行 `git diff --cached -U0`，只取新增行，
并保留扫描文本行号到新文件行号的映射。
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from guvnr.core.scanner import FileScanResult, ScanMode, kind_for_path, scan
from guvnr.errors import StagedDiffError

logger = logging.getLogger(__name__)

HUNK_HEADER = re.compile(r'^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@')
NEW_FILE_HEADER = re.compile(r"^\+\+\+ (.+)$")
DEV_NULL = "/dev/null"

# 引号路径中的片段：\ooo 八进制字节、\x 单字符转义、普通文本
QUOTED_PATH_TOKEN = re.compile(r'\\([0-7]{3})|\\(.)|([^\\]+)', re.S)
C_ESCAPES: dict[str, str] = {
    "a": "\a", "b": "\b", "t": "\t", "n": "\n", "v": "\v", "f": "\f", "r": "\r",
}


@dataclass(frozen=True)
class StagedAddition:
    """
    单个文件在暂存区中的新增内容

    Attributes:
        path: 仓库内相对路径
        lines: 新增行（不含前导 +）
        line_map: lines[i] 在新文件中的行号
    """
    path: str
    lines: tuple[str, ...]
    line_map: tuple[int, ...]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def _unquote(path: str) -> str:
    # git 对含特殊字符的路径加引号，并把非 ASCII 字节写成 \ooo 八进制转义
    if len(path) < 2 or path[0] != '"' or path[-1] != '"':
        return path
    data = bytearray()
    for octal, escaped, plain in QUOTED_PATH_TOKEN.findall(path[1:-1]):
        if octal:
            data.append(int(octal, 8))
        elif escaped:
            data.extend(C_ESCAPES.get(escaped, escaped).encode("utf-8"))
        else:
            data.extend(plain.encode("utf-8"))
    return data.decode("utf-8", errors="replace")


def parse_unified_diff(diff_text: str) -> list[StagedAddition]:
    """
    解析 unified diff，提取每个文件的新增行

    被删除的文件与没有新增行的文件不出现在结果中。

    Args:
        diff_text: `git diff` 输出

    Returns:
        StagedAddition 列表，按 diff 中的顺序
    """
    additions: list[StagedAddition] = []
    path: Optional[str] = None
    lines: list[str] = []
    line_map: list[int] = []
    in_header = False
    new_line = 0

    def flush() -> None:
        if path and lines:
            additions.append(StagedAddition(path=path, lines=tuple(lines), line_map=tuple(line_map)))

    for raw in diff_text.split("\n"):
        if raw.startswith("diff --git "):
            flush()
            path, lines, line_map = None, [], []
            in_header = True
            continue

        if in_header:
            match = NEW_FILE_HEADER.match(raw)
            if match:
                # 含空格的路径后面带一个制表符
                target = _unquote(match.group(1).rstrip("\t"))
                if target.startswith("b/"):
                    target = target[2:]
                path = None if target == DEV_NULL else target
                continue
            hunk = HUNK_HEADER.match(raw)
            if hunk:
                in_header = False
                new_line = int(hunk.group(1))
            continue

        hunk = HUNK_HEADER.match(raw)
        if hunk:
            new_line = int(hunk.group(1))
        elif raw.startswith("+"):
            lines.append(raw[1:])
            line_map.append(new_line)
            new_line += 1
        elif raw.startswith(" "):
            new_line += 1

    flush()
    return additions


def read_staged_additions(repo_path: Path) -> list[StagedAddition]:
    """
    读取暂存区的新增行

    Args:
        repo_path: 仓库内任意路径

    Returns:
        StagedAddition 列表

    Raises:
        StagedDiffError: 不是 git 仓库或 git 调用失败
    """
    try:
        repo = Repo(repo_path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise StagedDiffError(
            f"Not a git repository: {repo_path}",
            suggestion="Run inside a git working tree or drop --staged",
        ) from e

    try:
        diff_text = repo.git.diff("--cached", "-U0", "--no-color", "--no-ext-diff")
    except GitCommandError as e:
        raise StagedDiffError(f"git diff --cached failed: {e}") from e

    additions = parse_unified_diff(diff_text)
    logger.debug(f"{len(additions)} staged files with additions")
    return additions


def scan_staged(
    repo_path: Path,
    mode: Union[ScanMode, str] = ScanMode.BASIC,
    additions: Optional[list[StagedAddition]] = None,
) -> list[FileScanResult]:
    """
    扫描暂存区新增行

    Args:
        repo_path: 仓库内任意路径
        mode: 扫描模式
        additions: 已读取的新增内容，默认从 git 读取

    Returns:
        FileScanResult 列表，line_map 指向新文件行号
    """
    if additions is None:
        additions = read_staged_additions(repo_path)

    results: list[FileScanResult] = []
    for addition in additions:
        kind = kind_for_path(addition.path)
        if kind is None:
            continue
        report = scan(addition.text, kind, mode, source=addition.path)
        results.append(FileScanResult(
            path=addition.path,
            kind=kind,
            report=report,
            line_map=addition.line_map,
        ))
    return results
