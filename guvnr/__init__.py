"""
guvnr - AI 助手配置检查工具

检查 guvnr.yaml、CLAUDE.md、pre-commit 与 .gitignore 等配置，
并对源码或暂存区新增行执行固定的安全模式扫描。
"""

__version__ = "1.0.0"
