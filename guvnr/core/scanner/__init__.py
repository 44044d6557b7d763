"""
Scanner 模块 - 对源文本执行固定的安全模式检查

模块化结构：
- models.py: 枚举与不可变数据类
- patterns.py: 声明式规则表与抑制策略
- core.py: 纯函数扫描入口
"""

from guvnr.core.scanner.models import (
    Category,
    FileKind,
    FileScanResult,
    Location,
    ScanFinding,
    ScanMode,
    ScanReport,
    Severity,
)
from guvnr.core.scanner.patterns import (
    EXTENSION_TO_KIND,
    RULES,
    PatternRule,
)
from guvnr.core.scanner.core import (
    is_suppressed_source,
    kind_for_path,
    redact_span,
    sanitize_excerpt,
    scan,
)

__all__ = [
    # Models
    "Category",
    "FileKind",
    "FileScanResult",
    "Location",
    "ScanFinding",
    "ScanMode",
    "ScanReport",
    "Severity",
    # Patterns
    "EXTENSION_TO_KIND",
    "RULES",
    "PatternRule",
    # Core
    "is_suppressed_source",
    "kind_for_path",
    "redact_span",
    "sanitize_excerpt",
    "scan",
]
