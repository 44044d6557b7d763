"""
文件收集

遍历目录树，按 .gitignore 与配置中的排除规则过滤，
把可识别类型的文件交给扫描器。
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Union

from guvnr.core.scanner import FileKind, FileScanResult, ScanMode, kind_for_path, scan
from guvnr.errors import PathNotFoundError
from guvnr.filters import PathspecFilter

logger = logging.getLogger(__name__)


def iter_source_files(
    root: Path,
    extra_patterns: Optional[list[str]] = None,
    path_filter: Optional[PathspecFilter] = None,
) -> Iterator[tuple[Path, FileKind]]:
    """
    遍历目录树中可扫描的文件

    Args:
        root: 遍历起点
        extra_patterns: 额外的 gitignore 风格排除规则
        path_filter: 以项目根目录为基准的过滤器；遍历子目录时必须传入，
            否则根目录的 .gitignore 与排除规则不会生效

    Yields:
        (文件路径, 文件类型)，按路径排序
    """
    if path_filter is None:
        path_filter = PathspecFilter(root, extra_patterns=extra_patterns)
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        kind = kind_for_path(path.name)
        if kind is None:
            continue
        if path_filter.should_ignore(path):
            continue
        yield path, kind


def read_text_file(path: Path) -> Optional[str]:
    """
    读取文本文件

    不可读或非 UTF-8 的文件记录警告后返回 None，不中断扫描。
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Skipping {path}: {e}")
        return None


def _label(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _collect(
    root: Path,
    targets: Iterable[Path],
    extra_patterns: Optional[list[str]],
) -> Iterator[tuple[Path, FileKind]]:
    path_filter = PathspecFilter(root, extra_patterns=extra_patterns)
    for target in targets:
        if not target.is_absolute():
            target = root / target
        if not target.exists():
            raise PathNotFoundError(
                f"Path does not exist: {target}",
                suggestion="Check the path or run from the project root",
            )
        if target.is_dir():
            yield from iter_source_files(target, path_filter=path_filter)
            continue
        kind = kind_for_path(target.name)
        if kind is None:
            logger.debug(f"Unsupported file type, skipping: {target}")
            continue
        yield target, kind


def scan_files(
    root: Path,
    paths: Optional[list[Path]] = None,
    mode: Union[ScanMode, str] = ScanMode.BASIC,
    extra_patterns: Optional[list[str]] = None,
    on_file: Optional[Callable[[str, FileKind], None]] = None,
) -> list[FileScanResult]:
    """
    扫描文件或目录

    Args:
        root: 项目根目录（用于生成相对路径标签）
        paths: 要扫描的文件或目录，默认扫描整个 root
        mode: 扫描模式
        extra_patterns: 额外的排除规则
        on_file: 每扫描一个文件时的回调 (相对路径, 类型)

    Returns:
        FileScanResult 列表

    Raises:
        PathNotFoundError: 指定路径不存在
    """
    results: list[FileScanResult] = []
    for path, kind in _collect(root, paths or [root], extra_patterns):
        content = read_text_file(path)
        if content is None:
            continue
        label = _label(path, root)
        if on_file:
            on_file(label, kind)
        report = scan(content, kind, mode, source=label)
        results.append(FileScanResult(path=label, kind=kind, report=report))
    return results
