"""
错误类型定义

所有面向用户的错误都带有 GUVNR-<AREA>-<NNN> 形式的错误码，
CLI 层据此决定进程退出码。

错误码分段：
- VALID  200-299 校验失败
- CONFIG 300-399 配置文件问题
- FS     400-499 文件系统问题
- HOOK   700-799 git 钩子与暂存区读取
- SCAN   900-999 扫描器调用契约
"""

from typing import Any, Optional


EXIT_CODES: dict[str, int] = {
    "SUCCESS": 0,
    "GENERAL_ERROR": 1,
    "USAGE_ERROR": 2,
    "CONFIG_ERROR": 3,
    "VALIDATION_ERROR": 4,
    "NETWORK_ERROR": 5,
    "PERMISSION_ERROR": 6,
    "NOT_FOUND": 7,
}

# 错误区域 -> 退出码
_AREA_EXIT_CODES: dict[str, int] = {
    "VALID": EXIT_CODES["VALIDATION_ERROR"],
    "CONFIG": EXIT_CODES["CONFIG_ERROR"],
    "FS": EXIT_CODES["NOT_FOUND"],
    "HOOK": EXIT_CODES["GENERAL_ERROR"],
    "SCAN": EXIT_CODES["USAGE_ERROR"],
}


class GuvnrError(Exception):
    """
    guvnr 错误基类

    Attributes:
        code: 错误码（如 GUVNR-CONFIG-300）
        message: 错误描述
        suggestion: 修复建议
        context: 调试用的附加信息
    """

    default_code = "GUVNR-GEN-900"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        suggestion: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}

    @property
    def area(self) -> str:
        parts = self.code.split("-")
        return parts[1] if len(parts) >= 3 else "GEN"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.suggestion:
            data["suggestion"] = self.suggestion
        if self.context:
            data["context"] = self.context
        return data

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ScanContractError(GuvnrError, ValueError):
    """扫描器收到非法的 file_kind 或 mode"""

    default_code = "GUVNR-SCAN-900"


class ConfigError(GuvnrError):
    """guvnr.yaml 无法读取或格式错误"""

    default_code = "GUVNR-CONFIG-300"


class StagedDiffError(GuvnrError):
    """无法读取暂存区 diff（不是 git 仓库或 git 调用失败）"""

    default_code = "GUVNR-HOOK-700"


class PathNotFoundError(GuvnrError):
    """目标路径不存在"""

    default_code = "GUVNR-FS-400"


def exit_code_for(error: BaseException) -> int:
    """
    根据异常计算进程退出码

    Args:
        error: 任意异常

    Returns:
        退出码；非 GuvnrError 一律返回 GENERAL_ERROR
    """
    if isinstance(error, GuvnrError):
        return _AREA_EXIT_CODES.get(error.area, EXIT_CODES["GENERAL_ERROR"])
    return EXIT_CODES["GENERAL_ERROR"]
