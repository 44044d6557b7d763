"""
报告器基类 - 定义报告器接口
"""

from typing import Protocol

from guvnr.core.context import ProjectContext
from guvnr.core.doctor import Diagnostic
from guvnr.core.scanner import FileScanResult, Severity
from guvnr.core.validator import ValidationResult
from guvnr.metrics.todos import TodoCheck, TodoSummary


class Reporter(Protocol):
    """报告器协议"""

    def report_scan(self, results: list[FileScanResult], target: str, mode: str) -> None:
        """扫描报告"""
        ...

    def report_validation(self, result: ValidationResult, target: str) -> None:
        """校验报告"""
        ...

    def report_doctor(self, diagnostics: list[Diagnostic], verbose: bool = False) -> None:
        """诊断报告"""
        ...

    def report_todos(self, summary: TodoSummary) -> None:
        """目录树 TODO 汇总"""
        ...

    def report_todo_check(self, check: TodoCheck) -> None:
        """暂存区 TODO 策略结果"""
        ...

    def report_context(self, context: ProjectContext, source: str) -> None:
        """项目上下文"""
        ...


def scan_totals(results: list[FileScanResult]) -> dict[str, int]:
    """汇总多个文件的计数"""
    totals = {"files_scanned": len(results), "issue_count": 0, "error_count": 0,
              "warning_count": 0, "info_count": 0}
    for result in results:
        totals["issue_count"] += result.report.issue_count
        totals["error_count"] += result.report.error_count
        totals["warning_count"] += result.report.warning_count
        totals["info_count"] += result.report.info_count
    return totals


SEVERITY_STYLES: dict[Severity, tuple[str, str]] = {
    Severity.ERROR: ("✗", "red"),
    Severity.WARNING: ("⚠", "yellow"),
    Severity.INFO: ("ℹ", "blue"),
}
