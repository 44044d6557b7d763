"""
Reporters Layer - 报告层

包含 Rich 终端报告器和 JSON 报告器。
"""

from guvnr.reporters.base import Reporter
from guvnr.reporters.rich_reporter import RichReporter
from guvnr.reporters.json_reporter import JsonReporter

__all__ = [
    "Reporter",
    "RichReporter",
    "JsonReporter",
]


def get_reporter(format: str, console=None) -> Reporter:
    """按输出格式选择报告器"""
    if format == "json":
        return JsonReporter()
    return RichReporter(console)
