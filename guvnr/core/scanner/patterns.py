"""
正则表达式模式定义

扫描规则表：每条规则声明类别、严重程度、适用文件类型、是否可被
测试/示例/文档上下文抑制，以及是否只在 strict 模式下运行。
规则按声明顺序执行，顺序即输出顺序。
"""

import re
from dataclasses import dataclass

from guvnr.core.scanner.models import Category, FileKind, ScanMode, Severity

CODE_KINDS: frozenset[FileKind] = frozenset({FileKind.JS_TS, FileKind.PYTHON, FileKind.GO})
ALL_KINDS: frozenset[FileKind] = frozenset(FileKind)


@dataclass(frozen=True)
class PatternRule:
    """
    单条扫描规则

    Attributes:
        name: 规则标识（输出到 JSON 的 pattern 字段）
        category: 发现类别
        severity: 严重程度
        patterns: 正则列表，任一命中即视为该行命中
        kinds: 适用的文件类型
        suppressible: 是否受测试/示例/文档上下文抑制
        strict_only: 是否仅在 strict 模式运行
        secret: 命中片段是否需要在摘录中打码
    """
    name: str
    category: Category
    severity: Severity
    patterns: tuple[re.Pattern, ...]
    kinds: frozenset[FileKind] = ALL_KINDS
    suppressible: bool = True
    strict_only: bool = False
    secret: bool = False

    def enabled(self, kind: FileKind, mode: ScanMode) -> bool:
        if self.strict_only and mode != ScanMode.STRICT:
            return False
        return kind in self.kinds


def _vendor(name: str, category: Category, pattern: str) -> PatternRule:
    # 厂商前缀足够具体，不做上下文抑制
    return PatternRule(
        name=name,
        category=category,
        severity=Severity.ERROR,
        patterns=(re.compile(pattern),),
        suppressible=False,
        secret=True,
    )


RULES: tuple[PatternRule, ...] = (
    # ---- basic: eval ----
    PatternRule(
        name="eval-call",
        category=Category.EVAL_USAGE,
        severity=Severity.WARNING,
        patterns=(
            # 排除无参调用，如 model.eval()
            re.compile(r'\beval\s*\((?!\s*\))'),
            re.compile(r'\bnew\s+Function\s*\('),
        ),
        kinds=frozenset({FileKind.JS_TS, FileKind.PYTHON}),
        suppressible=False,
    ),
    # ---- basic: 硬编码凭据 ----
    PatternRule(
        name="credential-assignment",
        category=Category.HARDCODED_CREDENTIAL,
        severity=Severity.ERROR,
        patterns=(
            re.compile(
                r'(?i)(?:password|passwd|secret|api_key|apikey|api-key|token)[\w-]{0,64}'
                r'["\']?\s*(?::=|=|:)\s*["\'](?P<secret>[^"\'\n]{8,})'
            ),
        ),
        kinds=frozenset({FileKind.JS_TS, FileKind.PYTHON, FileKind.GO, FileKind.YAML, FileKind.MARKDOWN}),
        secret=True,
    ),
    _vendor("openai-key", Category.OPENAI_API_KEY, r'\bsk-[A-Za-z0-9]{32,}'),
    _vendor("anthropic-key", Category.ANTHROPIC_API_KEY, r'\bsk-ant-[A-Za-z0-9_-]{20,}'),
    _vendor("github-token", Category.GITHUB_TOKEN, r'\bgh[pousr]_[A-Za-z0-9]{36}(?![A-Za-z0-9])'),
    _vendor("aws-access-key-id", Category.AWS_ACCESS_KEY_ID, r'\b(?:AKIA|ASIA)[0-9A-Z]{16}\b'),
    _vendor("stripe-key", Category.STRIPE_SECRET_KEY, r'\b(?:sk|rk)_(?:live|test)_[A-Za-z0-9]{24,}'),
    _vendor("slack-token", Category.SLACK_TOKEN, r'\bxox[baprs]-[A-Za-z0-9-]{10,}'),
    _vendor("npm-token", Category.NPM_TOKEN, r'\bnpm_[A-Za-z0-9]{36}(?![A-Za-z0-9])'),
    _vendor("sendgrid-key", Category.SENDGRID_API_KEY, r'\bSG\.[A-Za-z0-9_-]{16,}\.[A-Za-z0-9_-]{32,}'),
    _vendor("private-key-block", Category.PRIVATE_KEY, r'-----BEGIN (?:[A-Z0-9]+ )*PRIVATE KEY-----'),
    # ---- basic: SQL 注入形状 ----
    PatternRule(
        name="sql-concatenation",
        category=Category.SQL_INJECTION,
        severity=Severity.WARNING,
        patterns=(
            re.compile(
                r'(?i)\b(?:SELECT|INSERT|UPDATE|DELETE)\b.*'
                r'(?:\+|\$\{|["\']\s*%\s*[\w(]|\.format\s*\()'
            ),
            re.compile(r'(?i)\bf["\'][^"\'\n]*\bSELECT\b'),
        ),
        kinds=CODE_KINDS,
    ),
    # ---- basic: 命令注入形状 ----
    PatternRule(
        name="command-execution",
        category=Category.COMMAND_INJECTION,
        severity=Severity.WARNING,
        patterns=(
            re.compile(
                r'\b(?:exec|execSync|execFile|execFileSync|spawn|spawnSync|Popen|popen|'
                r'check_output|check_call|getoutput|getstatusoutput)\s*\(.*(?:\+|\$\{|\bf["\'])'
            ),
            re.compile(r'\bshell\s*[=:]\s*(?:True|true)\b'),
            re.compile(r'\bos\.(?:system|popen|exec[lv]p?e?)\s*\('),
            re.compile(r'\bexec\.Command\s*\(\s*"(?:/bin/)?(?:sh|bash|zsh|cmd)"'),
        ),
        kinds=CODE_KINDS,
    ),
    # ---- strict: HTML 注入点 ----
    PatternRule(
        name="inner-html-assignment",
        category=Category.XSS_INNER_HTML,
        severity=Severity.WARNING,
        patterns=(
            re.compile(r'\b(?:innerHTML|outerHTML)\s*\+?=(?!=)'),
            re.compile(r'\binsertAdjacentHTML\s*\('),
            re.compile(r'\bdocument\.write(?:ln)?\s*\('),
        ),
        kinds=CODE_KINDS,
        strict_only=True,
    ),
    PatternRule(
        name="framework-unsafe-html",
        category=Category.XSS_DANGEROUS_HTML,
        severity=Severity.INFO,
        patterns=(
            re.compile(r'\bdangerouslySetInnerHTML\b'),
            re.compile(r'\bv-html\s*='),
            re.compile(r'\bbypassSecurityTrust\w*\s*\('),
            re.compile(r'\bmark_safe\s*\('),
            re.compile(r'\|\s*safe\b'),
            re.compile(r'\btemplate\.HTML\s*\('),
        ),
        kinds=CODE_KINDS,
        strict_only=True,
    ),
    # ---- strict: 不安全反序列化 ----
    PatternRule(
        name="unsafe-deserialization",
        category=Category.UNSAFE_DESERIALIZATION,
        severity=Severity.WARNING,
        patterns=(
            re.compile(r'\b(?:c?[Pp]ickle|marshal|dill)\.loads?\s*\('),
            re.compile(r'\bshelve\.open\s*\('),
            re.compile(r'\bjsonpickle\.decode\s*\('),
            re.compile(r'\bjoblib\.load\s*\('),
            re.compile(r'\bunserialize\s*\('),
        ),
        kinds=frozenset({FileKind.JS_TS, FileKind.PYTHON}),
        strict_only=True,
    ),
    PatternRule(
        name="unsafe-yaml-load",
        category=Category.UNSAFE_YAML_LOAD,
        severity=Severity.WARNING,
        patterns=(
            re.compile(r'\byaml\.(?:unsafe_load|full_load|unsafe_load_all|full_load_all)\s*\('),
            re.compile(r'\byaml\.load(?:_all)?\s*\((?!.*SafeLoader)'),
        ),
        kinds=frozenset({FileKind.JS_TS, FileKind.PYTHON}),
        strict_only=True,
    ),
)

# 抑制：路径片段
SUPPRESSED_PATH_SEGMENTS: frozenset[str] = frozenset({
    "test", "tests", "__tests__", "spec", "specs", "fixture", "fixtures",
    "testdata", "example", "examples", "sample", "samples", "docs", "doc",
})

# 抑制：文件名形状（test_x.py, x_test.go, x.test.ts, x.spec.js ...）
SUPPRESSED_FILE_NAME = re.compile(
    r'(?i)(?:^test_.*|.*_test\.\w+|.*\.(?:test|spec)\.\w+|.*\.example(?:\.\w+)?|.*\.sample(?:\.\w+)?|.*\.md)$'
)

# 抑制：行内显式标记
SUPPRESSION_LINE_MARKER = re.compile(
    r'(?i)\b(?:example|examples|placeholder|dummy|fixture|test)\b|pragma:\s*allowlist\s+secret'
)

# 终端转义序列与控制字符
ANSI_CSI = re.compile(r'\x1b\[[0-?]*[ -/]*[@-~]')
ANSI_OSC = re.compile(r'\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)?')
CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')

EXCERPT_MAX_LENGTH = 200
TRUNCATION_MARKER = "..."

# 文件扩展名到类型的映射
EXTENSION_TO_KIND: dict[str, FileKind] = {
    ".js": FileKind.JS_TS,
    ".jsx": FileKind.JS_TS,
    ".ts": FileKind.JS_TS,
    ".tsx": FileKind.JS_TS,
    ".mjs": FileKind.JS_TS,
    ".cjs": FileKind.JS_TS,
    ".py": FileKind.PYTHON,
    ".go": FileKind.GO,
    ".md": FileKind.MARKDOWN,
    ".markdown": FileKind.MARKDOWN,
    ".mdc": FileKind.MARKDOWN,
    ".yaml": FileKind.YAML,
    ".yml": FileKind.YAML,
}
