"""
CLI Layer - 命令行接口层
"""

from guvnr.cli.app import app, setup_logging

__all__ = [
    "app",
    "setup_logging",
]
