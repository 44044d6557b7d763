"""
仓库适配层 - 文件收集与暂存区 diff 读取

把纯扫描器扇出到文件系统与 git 暂存区。
"""

from guvnr.repo.files import (
    iter_source_files,
    read_text_file,
    scan_files,
)
from guvnr.repo.diff import (
    StagedAddition,
    parse_unified_diff,
    read_staged_additions,
    scan_staged,
)

__all__ = [
    "iter_source_files",
    "read_text_file",
    "scan_files",
    "StagedAddition",
    "parse_unified_diff",
    "read_staged_additions",
    "scan_staged",
]
