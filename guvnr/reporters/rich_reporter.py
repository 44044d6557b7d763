"""
Rich 终端报告器 - 使用 Rich 库输出彩色终端格式
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from guvnr.core.context import ProjectContext
from guvnr.core.doctor import CATEGORY_ORDER, Diagnostic
from guvnr.core.scanner import FileScanResult, Severity, sanitize_excerpt
from guvnr.core.validator import Issue, ValidationResult
from guvnr.metrics.todos import TodoCheck, TodoSummary
from guvnr.reporters.base import SEVERITY_STYLES, scan_totals

# 最多展示的问题数
MAX_ISSUES_SHOWN = 50


def _plain(text: str) -> str:
    """逐行去掉终端转义与控制字符，保留换行"""
    return "\n".join(sanitize_excerpt(line, len(line)) for line in text.split("\n"))


class RichReporter:
    """Rich 终端报告器"""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def _header(self, title: str) -> None:
        self.console.print()
        self.console.print("─" * 60, style="dim")
        self.console.print(title, style="bold cyan", justify="center")
        self.console.print("─" * 60, style="dim")

    # ---- scan ----

    def report_scan(self, results: list[FileScanResult], target: str, mode: str) -> None:
        """按文件列出扫描发现，最后给出汇总面板"""
        self._header(f"guvnr security scan ({mode})")

        shown = 0
        for result in results:
            if shown >= MAX_ISSUES_SHOWN:
                break
            if result.report.clean:
                continue
            self.console.print()
            self.console.print(f"[bold]{escape(result.path)}[/bold]")
            for finding in result.report.findings:
                if shown >= MAX_ISSUES_SHOWN:
                    break
                icon, style = SEVERITY_STYLES[finding.severity]
                line = result.source_line(finding)
                # 摘录已清洗，但仍可能含有 rich 标记字符
                self.console.print(
                    f"  [{style}]{icon} {finding.category.value}[/{style}] "
                    f"[dim]line {line}:{finding.location.column}[/dim]"
                )
                self.console.print(f"     [dim]{escape(finding.excerpt)}[/dim]")
                shown += 1

        totals = scan_totals(results)
        if totals["issue_count"] > shown:
            self.console.print(f"\n  [dim]... {totals['issue_count'] - shown} more not shown[/dim]")

        self._scan_summary(totals, target)

    def _scan_summary(self, totals: dict[str, int], target: str) -> None:
        if totals["issue_count"] == 0:
            body = f"[bold green]✓ No issues found[/bold green]\n[dim]{totals['files_scanned']} files scanned in {escape(target)}[/dim]"
            color = "green"
        else:
            color = "red" if totals["error_count"] else "yellow"
            body = (
                f"[red]{totals['error_count']}[/red] errors, "
                f"[yellow]{totals['warning_count']}[/yellow] warnings, "
                f"[blue]{totals['info_count']}[/blue] info\n"
                f"[dim]{totals['files_scanned']} files scanned in {escape(target)}[/dim]"
            )
        self.console.print()
        self.console.print(Panel(body, title="[bold]Summary[/bold]", border_style=color))

    # ---- validate ----

    def report_validation(self, result: ValidationResult, target: str) -> None:
        """按严重程度分组打印未通过的规则"""
        self._header("guvnr configuration validator")
        total = result.stats.get("total_rules", 0)
        self.console.print(f"\n  Validation results: {len(result.passed_rules)}/{total} checks passed\n")

        if result.passed_rules:
            self.console.print("[green]  ✓ Passed:[/green]")
            for rule_id in result.passed_rules:
                self.console.print(f"[dim]    ✓ {rule_id}[/dim]")
            self.console.print()

        groups = (
            ("error", "Errors (must fix)"),
            ("warning", "Warnings (should fix)"),
            ("info", "Info (optional)"),
        )
        for severity, label in groups:
            issues = result.by_severity(severity)
            if not issues:
                continue
            icon, style = SEVERITY_STYLES[Severity(severity)]
            self.console.print(f"[{style}]  {icon} {label}:[/{style}]")
            for issue in issues:
                self._print_issue(issue, icon, style)
            self.console.print()

        if result.passed and not result.warnings:
            self.console.print("[green]  ✓ All critical checks passed![/green]\n")
        elif result.passed:
            self.console.print("[yellow]  ⚠ Configuration is functional but has warnings to address.[/yellow]\n")
        else:
            self.console.print("[red]  ✗ Configuration has errors that need to be fixed.[/red]\n")

    def _print_issue(self, issue: Issue, icon: str, style: str) -> None:
        location = issue.file_path
        if issue.line_number:
            location += f":{issue.line_number}"
        self.console.print(f"    [{style}]{icon} {escape(issue.message)}[/{style}] [dim]({issue.code}, {escape(location)})[/dim]")
        if issue.suggestion:
            self.console.print(f"      [dim]→ {escape(issue.suggestion)}[/dim]")

    # ---- doctor ----

    def report_doctor(self, diagnostics: list[Diagnostic], verbose: bool = False) -> None:
        """按分类打印诊断结果"""
        self._header("guvnr doctor")
        for category in CATEGORY_ORDER:
            items = [d for d in diagnostics if d.category == category]
            if not items:
                continue
            self.console.print(f"\n  [bold]{category.capitalize()}:[/bold]")
            for item in items:
                icon = "[green]✓[/green]" if item.passed else "[red]✗[/red]"
                value_style = "green" if item.passed else "yellow"
                self.console.print(f"    {icon} {item.name}: [{value_style}]{escape(item.value)}[/{value_style}]")
                if item.passed:
                    continue
                if item.hint:
                    prefix = "└─" if verbose else "Hint:"
                    self.console.print(f"      [dim]{prefix} {escape(item.hint)}[/dim]")
                if item.required:
                    self.console.print(f"      [dim]Required: {item.required}[/dim]")

        passed = sum(1 for d in diagnostics if d.passed)
        self.console.print(f"\n  Summary: {passed}/{len(diagnostics)} checks passed\n")
        if passed == len(diagnostics):
            self.console.print("[green]  ✓ All systems operational![/green]\n")
        else:
            self.console.print("[yellow]  ⚠ Some issues detected. See hints above.[/yellow]\n")

    # ---- todos ----

    def report_todos(self, summary: TodoSummary) -> None:
        self._header("guvnr TODO markers")
        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Marker", style="cyan", width=10)
        table.add_column("Count", justify="right", width=8)
        for priority, count in summary.by_priority.items():
            if count:
                table.add_row(priority, str(count))
        self.console.print(table)

        for item in summary.items:
            style = "red" if item.critical else "dim"
            self.console.print(
                f"  [{style}]{item.priority.value}[/{style}] "
                f"{escape(item.file_path)}:{item.line_number} [dim]{escape(item.text)}[/dim]"
            )

        self.console.print(
            f"\n  Total: {summary.total_count} markers, "
            f"[red]{summary.critical_count}[/red] critical\n"
        )

    def report_todo_check(self, check: TodoCheck) -> None:
        if check.blocked:
            self.console.print("[red]🔴 Critical TODOs found in staged changes:[/red]")
            for item in check.critical:
                self.console.print(f"  {escape(item.file_path)}:{item.line_number}: {escape(item.full_line)}")
            self.console.print("\nThese should be resolved before committing.")
            self.console.print("[dim]To override: git commit --no-verify[/dim]")
            return
        if check.warn:
            self.console.print(
                f"[yellow]⚠ Warning: {check.count} new TODO/FIXME comments in this commit[/yellow]"
            )
            self.console.print("[dim]   Consider addressing these before committing[/dim]")
            return
        self.console.print(f"[green]✓ {check.count} new TODO/FIXME markers (limit {check.max_new})[/green]")

    # ---- context ----

    def report_context(self, context: ProjectContext, source: str) -> None:
        self._header(f"Project context: {escape(_plain(context.project_name or source))}")
        if context.overview:
            self.console.print(Panel(escape(_plain(context.overview)), title="Overview", border_style="cyan"))

        if context.tech_stack:
            table = Table(title="Tech Stack", show_header=False, box=None)
            table.add_column("Category", style="cyan")
            table.add_column("Value")
            for item in context.tech_stack:
                table.add_row(escape(_plain(item.category)), escape(_plain(item.value)))
            self.console.print(table)

        if context.current_state:
            self.console.print(Panel(escape(_plain(context.current_state)), title="Current State", border_style="dim"))

        if context.security_checklist:
            self.console.print("\n[bold]Security Checklist[/bold]")
            for entry in context.security_checklist:
                self.console.print(f"  ☐ {escape(_plain(entry))}")
        self.console.print()
