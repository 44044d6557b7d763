"""
CLI 入口模块 - 使用 Typer 构建命令行界面

命令：
- scan: 对文件、目录或暂存区新增行执行安全模式扫描
- validate: 校验项目的 AI 助手配置
- doctor: 环境诊断
- todos: TODO 标记统计与提交前检查
- context: 解析 CLAUDE.md
- version: 显示版本
"""

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from guvnr.config import load_config
from guvnr.core.context import parse_project_context
from guvnr.core.doctor import run_diagnostics
from guvnr.core.scanner import ScanMode
from guvnr.core.validator import Validator
from guvnr.errors import (
    EXIT_CODES,
    GuvnrError,
    PathNotFoundError,
    ScanContractError,
    exit_code_for,
)
from guvnr.metrics.todos import TodoAnalyzer, check_staged_todos
from guvnr.reporters import get_reporter
from guvnr.reporters.base import scan_totals
from guvnr.repo import read_staged_additions, scan_files, scan_staged

# 创建 Typer 应用实例
app = typer.Typer(
    name="guvnr",
    help="guvnr: check AI assistant project configuration and scan code for risky patterns.",
    add_completion=False,
)

# Rich Console 用于输出；日志走 stderr，避免污染 JSON 输出
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("guvnr")

FORMATS = ("rich", "json")


def setup_logging(verbose: bool = False) -> None:
    """在 guvnr 日志器上安装 RichHandler（重复调用只更新级别）"""
    level = logging.DEBUG if verbose else logging.WARNING
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=err_console, show_path=False, show_time=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level)


def _abort(error: GuvnrError) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {error.message}")
    if error.suggestion:
        err_console.print(f"[dim]→ {error.suggestion}[/dim]")
    raise typer.Exit(exit_code_for(error))


def _check_format(format: str) -> None:
    if format not in FORMATS:
        err_console.print(f"[red]Error:[/red] Unknown format '{format}' (expected rich or json)")
        raise typer.Exit(EXIT_CODES["USAGE_ERROR"])


def _resolve_dir(target: str) -> Path:
    path = Path(target).resolve()
    if not path.exists():
        raise PathNotFoundError(f"Path does not exist: {target}")
    if not path.is_dir():
        raise PathNotFoundError(f"Path is not a directory: {target}")
    return path


@app.command()
def scan(
    paths: Optional[list[str]] = typer.Argument(
        None,
        help="Files or directories to scan (default: current directory)",
    ),
    mode: Optional[str] = typer.Option(
        None,
        "--mode",
        "-m",
        help="Scan mode: basic or strict (default from guvnr.yaml, else basic)",
    ),
    staged: bool = typer.Option(
        False,
        "--staged",
        help="Scan only lines added in the git index",
    ),
    format: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich (default) or json",
    ),
    enforce: Optional[bool] = typer.Option(
        None,
        "--enforce/--no-enforce",
        help="Exit 1 when any error-severity finding is reported",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed output",
    ),
) -> None:
    """
    Scan source text for secrets and injection-shaped code.

    Examples:
        guvnr scan
        guvnr scan src/ --mode strict
        guvnr scan --staged --enforce
        guvnr scan --format json
    """
    setup_logging(verbose)
    _check_format(format)
    root = Path.cwd()

    try:
        config = load_config(root)
        mode_value = mode or config.scan_mode.value
        try:
            scan_mode = ScanMode(mode_value)
        except ValueError:
            raise ScanContractError(
                f"Invalid scan mode: {mode_value!r}",
                suggestion="Use --mode basic or --mode strict",
            )

        if staged:
            results = scan_staged(root, scan_mode)
            target = "staged changes"
        else:
            targets = [Path(p) for p in paths] if paths else None

            def on_file(label: str, kind) -> None:
                logger.debug(f"({kind.value}) {label}")

            results = scan_files(
                root,
                targets,
                scan_mode,
                extra_patterns=config.exclude,
                on_file=on_file,
            )
            target = ", ".join(paths) if paths else str(root)
    except GuvnrError as e:
        _abort(e)

    get_reporter(format, console).report_scan(results, target, scan_mode.value)

    should_enforce = config.enforce if enforce is None else enforce
    if should_enforce and scan_totals(results)["error_count"] > 0:
        raise typer.Exit(EXIT_CODES["GENERAL_ERROR"])
    raise typer.Exit(EXIT_CODES["SUCCESS"])


@app.command()
def validate(
    target: str = typer.Argument(
        ".",
        help="Project directory to validate",
    ),
    format: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich (default) or json",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Treat warnings as failures",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
) -> None:
    """
    Validate guvnr.yaml, CLAUDE.md, pre-commit and .gitignore setup.

    Exits 4 when an error-severity check fails.
    """
    setup_logging(verbose)
    _check_format(format)
    try:
        repo_path = _resolve_dir(target)
    except GuvnrError as e:
        _abort(e)

    result = Validator(repo_path).validate_all()
    get_reporter(format, console).report_validation(result, target)

    if not result.passed or (strict and result.warnings):
        raise typer.Exit(EXIT_CODES["VALIDATION_ERROR"])
    raise typer.Exit(EXIT_CODES["SUCCESS"])


@app.command()
def doctor(
    target: str = typer.Argument(".", help="Project directory"),
    format: str = typer.Option("rich", "--format", "-f", help="Output format: rich (default) or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
) -> None:
    """Diagnose the local environment. Advisory only, always exits 0."""
    setup_logging(verbose)
    _check_format(format)
    try:
        repo_path = _resolve_dir(target)
    except GuvnrError as e:
        _abort(e)

    diagnostics = run_diagnostics(repo_path)
    get_reporter(format, console).report_doctor(diagnostics, verbose)


@app.command()
def todos(
    target: str = typer.Argument(".", help="Project directory"),
    staged: bool = typer.Option(
        False,
        "--staged",
        help="Check only lines added in the git index; critical markers exit 1",
    ),
    max_new: Optional[int] = typer.Option(
        None,
        "--max-new",
        min=0,
        help="Warn when more new TODO/FIXME markers are staged (default 3)",
    ),
    format: str = typer.Option("rich", "--format", "-f", help="Output format: rich (default) or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
) -> None:
    """Report TODO/FIXME/HACK/XXX markers."""
    setup_logging(verbose)
    _check_format(format)
    reporter = get_reporter(format, console)

    try:
        repo_path = _resolve_dir(target)
        config = load_config(repo_path)
        if staged:
            additions = read_staged_additions(repo_path)
            check = check_staged_todos(
                additions,
                max_new=config.max_new_todos if max_new is None else max_new,
            )
        else:
            summary = TodoAnalyzer(repo_path, extra_patterns=config.exclude).analyze()
    except GuvnrError as e:
        _abort(e)

    if not staged:
        reporter.report_todos(summary)
        raise typer.Exit(EXIT_CODES["SUCCESS"])

    reporter.report_todo_check(check)
    if check.blocked:
        raise typer.Exit(EXIT_CODES["GENERAL_ERROR"])
    raise typer.Exit(EXIT_CODES["SUCCESS"])


@app.command()
def context(
    file: str = typer.Argument("CLAUDE.md", help="Context file to parse"),
    format: str = typer.Option("rich", "--format", "-f", help="Output format: rich (default) or json"),
) -> None:
    """Show the parsed project context of CLAUDE.md."""
    _check_format(format)
    path = Path(file)
    try:
        if not path.is_file():
            raise PathNotFoundError(
                f"File not found: {file}",
                suggestion="Create CLAUDE.md or pass the path to your context file",
            )
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PathNotFoundError(f"Cannot read {file}: {e}") from e
    except GuvnrError as e:
        _abort(e)

    get_reporter(format, console).report_context(parse_project_context(text), file)


@app.command()
def version() -> None:
    """Show the version of guvnr."""
    from guvnr import __version__
    console.print(f"[bold]guvnr[/bold] v{__version__}")


if __name__ == "__main__":
    app()
