# Rich console output: scan results, summaries and reports for the terminal.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from securedev.findings.models import SEVERITY_ORDER, Finding, ScanResult, Severity
from securedev.projects import ProjectInfo

# Severity → Rich style
SEVERITY_STYLE = {
    Severity.CRITICAL: "bold white on red",
    Severity.HIGH: "bold red",
    Severity.MEDIUM: "bold yellow",
    Severity.LOW: "cyan",
    Severity.INFO: "dim",
}

GRADE_STYLE = {
    "A": "bold black on green",
    "B": "bold green",
    "C": "bold yellow",
    "D": "bold red",
    "F": "bold white on red",
}

REMEDIATION_PREVIEW = 40
NO_LOCATION = "-"


def severity_text(severity: Severity) -> Text:
    return Text(f" {severity.value} ", style=SEVERITY_STYLE[severity])


def grade_text(grade: str) -> Text:
    return Text(f" {grade} ", style=GRADE_STYLE.get(grade, "bold white"))


def _location(finding: Finding) -> str:
    return finding.location or NO_LOCATION


def _is_blocking_level(finding: Finding) -> bool:
    return finding.severity in (Severity.CRITICAL, Severity.HIGH)


def _pills(result: ScanResult) -> Text:
    """One pill per severity; zero counts are greyed out."""
    pills = Text("  ")
    for severity in (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW):
        count = result.summary.count(severity)
        style = SEVERITY_STYLE[severity] if count else "dim"
        pills.append(f" {count} {severity.value} ", style=style)
        pills.append("  ")
    return pills


def _findings_table(findings: Sequence[Finding], *, with_severity: bool) -> Table:
    table = Table(
        show_header=True,
        header_style="bold magenta",
        box=box.SIMPLE,
        padding=(0, 1),
        expand=False,
    )
    if with_severity:
        table.add_column("Severity", width=10)
    table.add_column("Finding", style="white", max_width=40)
    table.add_column("Location", style="dim", max_width=30)
    table.add_column("Remediation", max_width=45)

    for f in findings:
        if with_severity:
            remediation = (f.remediation or "")[:REMEDIATION_PREVIEW]
        else:
            remediation = f.remediation or f.description[:45]
        row = [f.title, _location(f), remediation or NO_LOCATION]
        if with_severity:
            row.insert(0, severity_text(f.severity))
        table.add_row(*row)
    return table


def print_scan_result(result: ScanResult, console: Optional[Console] = None) -> None:
    """
    Print one scan result: header with grade, severity pills, and a table of
    the CRITICAL/HIGH findings. MEDIUM/LOW findings are only counted; the
    full list is available through `securedev report`.
    """
    console = console or Console()

    header = Text.assemble(
        (result.project, "bold"),
        "  Score: ",
        grade_text(result.score),
        (f" ({result.score_numeric}/100)", "dim"),
        (f"  {result.duration_ms}ms", "dim"),
    )
    console.print()
    console.print(Panel(header, box=box.ROUNDED, border_style="blue", padding=(0, 1)))
    console.print(_pills(result))

    if not result.findings:
        console.print("[green]  No issues found[/green]")
        console.print()
        return

    visible = [f for f in result.findings if _is_blocking_level(f)]
    if not visible:
        med = result.summary.medium
        low = result.summary.low
        console.print(
            f"[dim]  {med} medium, {low} low severity findings. "
            f"Run: securedev report {result.project}[/dim]"
        )
        console.print()
        return

    console.print(_findings_table(visible, with_severity=True))
    remaining = len(result.findings) - len(visible)
    if remaining > 0:
        console.print(
            f"[dim]  + {remaining} more (MEDIUM/LOW). Run: securedev report {result.project}[/dim]"
        )
    console.print()


def print_summary_table(results: Sequence[ScanResult], console: Optional[Console] = None) -> None:
    """Compact per-project table, printed only when more than one project was scanned."""
    if len(results) <= 1:
        return
    console = console or Console()

    table = Table(
        title="Summary",
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column("Project", style="white")
    table.add_column("Score", justify="center")
    for label in ("C", "H", "M", "L"):
        table.add_column(label, justify="right")
    table.add_column("Time", justify="right", style="dim")

    for r in results:
        table.add_row(
            r.project,
            grade_text(r.score),
            str(r.summary.critical),
            str(r.summary.high),
            str(r.summary.medium),
            str(r.summary.low),
            f"{r.duration_ms}ms",
        )

    console.print()
    console.print(table)

    total_critical = sum(r.summary.critical for r in results)
    total_high = sum(r.summary.high for r in results)
    if total_critical:
        message = f"[bold white on red]  {total_critical} critical issue(s) require immediate attention[/]"
    elif total_high:
        message = f"[bold red]  {total_high} high severity issue(s) found[/]"
    else:
        message = f"[green]  All {len(results)} projects clean[/green]"
    console.print(message)
    console.print()


def scan_age(scanned_at: datetime, now: Optional[datetime] = None) -> str:
    """'today' or 'Nd ago' for the last-scan column."""
    now = now or datetime.now(timezone.utc)
    if scanned_at.tzinfo is None:
        scanned_at = scanned_at.replace(tzinfo=timezone.utc)
    days = (now - scanned_at).days
    return "today" if days <= 0 else f"{days}d ago"


def print_project_list(
    projects: Sequence[ProjectInfo],
    get_report: Callable[[str], Optional[ScanResult]],
    console: Optional[Console] = None,
) -> None:
    console = console or Console()
    console.print()
    console.print(f"[bold]  Security Overview  -  {len(projects)} projects[/bold]")

    table = Table(show_header=True, header_style="bold cyan", box=box.ROUNDED, padding=(0, 1))
    table.add_column("Project", style="white")
    table.add_column("Score", justify="center")
    for label in ("C", "H", "M", "L"):
        table.add_column(label, justify="right")
    table.add_column("Last Scan", style="dim")

    scanned = 0
    for p in projects:
        report = get_report(p.name)
        if report is None:
            table.add_row(Text(p.name, style="dim"), "?", "-", "-", "-", "-", "not scanned")
            continue
        scanned += 1
        table.add_row(
            p.name,
            grade_text(report.score),
            str(report.summary.critical),
            str(report.summary.high),
            str(report.summary.medium),
            str(report.summary.low),
            scan_age(report.scanned_at),
        )

    console.print(table)
    console.print(f"[dim]  {scanned}/{len(projects)} scanned  -  securedev scan --all[/dim]")
    console.print()


def print_full_report(report: ScanResult, console: Optional[Console] = None) -> None:
    """Every finding of a stored report, grouped by severity (most severe first)."""
    console = console or Console()
    scanned = report.scanned_at.strftime("%Y-%m-%d %H:%M:%S")

    console.print()
    console.print(f"[bold]  Security Report  -  {report.project}[/bold]")
    console.print(
        Text.assemble(
            f"  Scanned: {scanned}  Score: ",
            grade_text(report.score),
            f" ({report.score_numeric}/100)",
        )
    )
    console.print()

    for severity in SEVERITY_ORDER:
        group = [f for f in report.findings if f.severity is severity]
        if not group:
            continue
        plural = "s" if len(group) > 1 else ""
        console.print(Text.assemble("  ", severity_text(severity), (f"  {len(group)} finding{plural}", "bold")))
        console.print(_findings_table(group, with_severity=False))
