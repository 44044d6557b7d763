"""
JSON 报告器 - 输出 JSON 格式报告
"""

import json
import sys
from dataclasses import asdict
from typing import Any, TextIO

from guvnr.core.context import ProjectContext
from guvnr.core.doctor import Diagnostic
from guvnr.core.scanner import FileScanResult
from guvnr.core.validator import Issue, ValidationResult
from guvnr.metrics.todos import TodoCheck, TodoItem, TodoSummary
from guvnr.reporters.base import scan_totals


def _issue_dict(issue: Issue) -> dict[str, Any]:
    return {
        "severity": issue.severity,
        "code": issue.code,
        "message": issue.message,
        "file_path": issue.file_path,
        "line_number": issue.line_number,
        "suggestion": issue.suggestion,
    }


def _todo_dict(item: TodoItem) -> dict[str, Any]:
    return {
        "priority": item.priority.value,
        "text": item.text,
        "file_path": item.file_path,
        "line_number": item.line_number,
        "critical": item.critical,
        "line": item.full_line,
    }


class JsonReporter:
    """JSON 报告器"""

    def __init__(self, output: TextIO | None = None):
        self.output = output or sys.stdout

    def _emit(self, data: dict[str, Any]) -> None:
        print(json.dumps(data, indent=2, ensure_ascii=False), file=self.output)

    def report_scan(self, results: list[FileScanResult], target: str, mode: str) -> None:
        files = []
        for result in results:
            findings = []
            for finding in result.report.findings:
                entry = finding.to_dict()
                entry["line"] = result.source_line(finding)
                findings.append(entry)
            files.append({"path": result.path, "kind": result.kind.value, "findings": findings})

        totals = scan_totals(results)
        self._emit({
            "target": target,
            "mode": mode,
            "files": files,
            "summary": {**totals, "clean": totals["issue_count"] == 0},
        })

    def report_validation(self, result: ValidationResult, target: str) -> None:
        self._emit({
            "target": target,
            "valid": result.passed,
            "passed": len(result.passed_rules),
            "total": result.stats.get("total_rules", 0),
            "errors": [_issue_dict(i) for i in result.errors],
            "warnings": [_issue_dict(i) for i in result.warnings],
            "info": [_issue_dict(i) for i in result.info],
            "stats": result.stats,
        })

    def report_doctor(self, diagnostics: list[Diagnostic], verbose: bool = False) -> None:
        self._emit({
            "diagnostics": [asdict(d) for d in diagnostics],
            "passed": sum(1 for d in diagnostics if d.passed),
            "total": len(diagnostics),
        })

    def report_todos(self, summary: TodoSummary) -> None:
        self._emit({
            "total_count": summary.total_count,
            "critical_count": summary.critical_count,
            "by_priority": summary.by_priority,
            "weighted_score": round(summary.weighted_score, 3),
            "items": [_todo_dict(i) for i in summary.items],
        })

    def report_todo_check(self, check: TodoCheck) -> None:
        self._emit({
            "blocked": check.blocked,
            "warn": check.warn,
            "count": check.count,
            "max_new": check.max_new,
            "critical": [_todo_dict(i) for i in check.critical],
        })

    def report_context(self, context: ProjectContext, source: str) -> None:
        self._emit({"source": source, **context.to_dict()})
