"""
数据模型定义

包含扫描器使用的所有枚举和数据类。扫描结果一经返回即不可变。
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FileKind(str, Enum):
    """被扫描文本的文件类型"""
    JS_TS = "js_ts"
    PYTHON = "python"
    GO = "go"
    MARKDOWN = "markdown"
    YAML = "yaml"


class ScanMode(str, Enum):
    """扫描模式：basic 只跑四类基础规则，strict 追加更嘈杂的规则"""
    BASIC = "basic"
    STRICT = "strict"


class Severity(str, Enum):
    """严重程度（仅分类，不决定是否阻断）"""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Category(str, Enum):
    """发现类别（封闭集合）"""
    EVAL_USAGE = "eval_usage"
    HARDCODED_CREDENTIAL = "hardcoded_credential"
    # 已知厂商密钥形状，独立于通用凭据启发式
    OPENAI_API_KEY = "openai_api_key"
    ANTHROPIC_API_KEY = "anthropic_api_key"
    GITHUB_TOKEN = "github_token"
    AWS_ACCESS_KEY_ID = "aws_access_key_id"
    STRIPE_SECRET_KEY = "stripe_secret_key"
    SLACK_TOKEN = "slack_token"
    NPM_TOKEN = "npm_token"
    SENDGRID_API_KEY = "sendgrid_api_key"
    PRIVATE_KEY = "private_key"
    SQL_INJECTION = "sql_injection"
    COMMAND_INJECTION = "command_injection"
    # strict 模式
    XSS_INNER_HTML = "xss_inner_html"
    XSS_DANGEROUS_HTML = "xss_dangerous_html"
    UNSAFE_DESERIALIZATION = "unsafe_deserialization"
    UNSAFE_YAML_LOAD = "unsafe_yaml_load"


# JSON 边界上 severity -> confidence 的映射
CONFIDENCE_BY_SEVERITY: dict[Severity, str] = {
    Severity.ERROR: "high",
    Severity.WARNING: "medium",
    Severity.INFO: "low",
}


@dataclass(frozen=True)
class Location:
    """
    发现位置

    Attributes:
        line: 行号 (1-based)
        column: 列偏移 (0-based，相对原始行)
    """
    line: int
    column: int = 0


@dataclass(frozen=True)
class ScanFinding:
    """
    单条扫描发现

    Attributes:
        category: 发现类别
        severity: 严重程度，由类别决定
        location: 行列位置
        excerpt: 清洗并截断后的匹配行
        pattern: 命中的规则标识
    """
    category: Category
    severity: Severity
    location: Location
    excerpt: str
    pattern: str = ""

    @property
    def confidence(self) -> str:
        return CONFIDENCE_BY_SEVERITY[self.severity]

    def to_dict(self) -> dict[str, Any]:
        """转换为边界 JSON 结构 {type, pattern, line, column, match, confidence}"""
        return {
            "type": self.category.value,
            "pattern": self.pattern,
            "line": self.location.line,
            "column": self.location.column,
            "match": self.excerpt,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class ScanReport:
    """
    一次扫描的汇总结果

    计数全部由 findings 派生，不单独存储。

    Attributes:
        findings: 按发现顺序排列的扫描发现
    """
    findings: tuple[ScanFinding, ...] = field(default_factory=tuple)

    @property
    def issue_count(self) -> int:
        return len(self.findings)

    @property
    def error_count(self) -> int:
        return self._count(Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return self._count(Severity.WARNING)

    @property
    def info_count(self) -> int:
        return self._count(Severity.INFO)

    @property
    def clean(self) -> bool:
        return not self.findings

    def _count(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity == severity)

    def by_category(self, category: Category) -> list[ScanFinding]:
        """按类别过滤"""
        return [f for f in self.findings if f.category == category]

    def to_dict(self) -> dict[str, Any]:
        return {
            "findings": [f.to_dict() for f in self.findings],
            "issue_count": self.issue_count,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
        }

    def to_json(self) -> str:
        """序列化为 JSON 字符串"""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)


@dataclass(frozen=True)
class FileScanResult:
    """
    单个文件的扫描结果（由文件适配层产生）

    Attributes:
        path: 相对路径
        kind: 文件类型
        report: 扫描报告
        line_map: 扫描文本行号 -> 源文件行号（仅 diff 扫描时使用）
    """
    path: str
    kind: FileKind
    report: ScanReport
    line_map: tuple[int, ...] = ()

    def source_line(self, finding: ScanFinding) -> int:
        """返回发现对应的源文件行号"""
        index = finding.location.line - 1
        if 0 <= index < len(self.line_map):
            return self.line_map[index]
        return finding.location.line
