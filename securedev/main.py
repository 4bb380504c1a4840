"""
Typer CLI entry point.

Commands:
- scan:   scan one project (by name or path) or every discovered project
- list:   discovered projects with their last stored score
- report: full findings of the last stored scan
- guard:  pre/post hook for agent runs; exits 1 only on blocking findings
- config: show or update the persisted configuration

Every scan is saved as a JSON report; `list` and `report` only read those.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from securedev.config import Config, load_config, save_config
from securedev.findings.models import Finding, ScanResult, Severity
from securedev.orchestrator import run_scan
from securedev.projects import ProjectInfo, discover_projects
from securedev.report import load_latest_report, save_report, write_security_md
from securedev.reporting.console import print_full_report, print_project_list, print_scan_result, print_summary_table

logger = logging.getLogger(__name__)

app = typer.Typer(help="securedev - security checks for AI-assisted development workspaces.")

BLOCK_LEVELS = ("CRITICAL", "HIGH")
GUARD_LISTED_FINDINGS = 5


def _workspace_root(config: Config) -> Path:
    """Configured workspace root, or the current directory when none is set."""
    if config.workspace_root:
        return Path(config.workspace_root).expanduser()
    return Path.cwd()


def _discover(config: Config) -> List[ProjectInfo]:
    return discover_projects(_workspace_root(config), exclude=config.exclude_projects)


def _resolve_project(target: str, config: Config) -> Optional[ProjectInfo]:
    """Match a discovered project by name or path, else accept an existing directory."""
    for p in _discover(config):
        if target in (p.name, p.project_path):
            return p
    path = Path(target).expanduser()
    if path.is_dir():
        resolved = path.resolve()
        return ProjectInfo(name=resolved.name, project_path=str(resolved))
    return None


def _normalize_block_on(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    upper = value.upper()
    if upper not in BLOCK_LEVELS:
        raise typer.BadParameter(f"must be CRITICAL or HIGH, got: {value}")
    return upper


def blocking_findings(result: ScanResult, block_on: str) -> List[Finding]:
    """Findings at or above the blocking severity."""
    threshold = Severity(block_on).rank
    return [f for f in result.findings if f.severity.rank <= threshold]


@app.callback()
def cli(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def scan(
    project: Optional[str] = typer.Argument(None, help="Project name or path."),
    all_projects: bool = typer.Option(False, "--all", help="Scan every discovered project."),
    update_security_md: bool = typer.Option(
        False, "--update-security-md", help="Write SECURITY.md into each scanned project."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON."),
) -> None:
    """Scan one project, or all of them with --all."""
    config = load_config()

    if all_projects:
        targets = _discover(config)
    elif project:
        found = _resolve_project(project, config)
        if found is None:
            typer.echo(f"Project not found: {project}", err=True)
            raise typer.Exit(code=1)
        targets = [found]
    else:
        targets = []

    if not targets:
        typer.echo("No projects to scan. Use --all or specify a project name.", err=True)
        raise typer.Exit(code=1)

    results: List[ScanResult] = []
    for p in targets:
        try:
            result = run_scan(p.project_path)
        except Exception as exc:
            logger.exception("Scan of %s failed", p.name)
            typer.echo(f"{p.name} - scan failed: {exc}", err=True)
            continue
        save_report(result)
        if update_security_md:
            write_security_md(result, Path(p.project_path))
        results.append(result)
        if not as_json:
            print_scan_result(result)

    if as_json:
        typer.echo(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
    else:
        print_summary_table(results)


@app.command("list")
def list_projects() -> None:
    """List discovered projects with their last known score."""
    projects = _discover(load_config())
    if not projects:
        typer.echo("No projects found.")
        return
    print_project_list(projects, load_latest_report)


@app.command()
def report(
    project: str = typer.Argument(..., help="Project name."),
    as_json: bool = typer.Option(False, "--json", help="Print the stored report as JSON."),
) -> None:
    """Show the last stored scan report for a project."""
    stored = load_latest_report(project)
    if stored is None:
        typer.echo(f"No scan report found for {project}. Run: securedev scan {project}")
        return
    if as_json:
        typer.echo(stored.model_dump_json(indent=2))
        return
    print_full_report(stored)


@app.command()
def guard(
    project: str = typer.Option(..., "--project", help="Project name or path."),
    pre: bool = typer.Option(False, "--pre", help="Pre-run check."),
    post: bool = typer.Option(False, "--post", help="Post-run check."),
    block_on: Optional[str] = typer.Option(
        None, "--block-on", help="CRITICAL or HIGH (defaults to the configured level)."
    ),
) -> None:
    """
    Hook for agent runs. Exits 1 when blocking findings exist.

    A project that cannot be found, or a scan that errors, never blocks.
    """
    config = load_config()
    level = _normalize_block_on(block_on) or config.block_on_severity

    found = _resolve_project(project, config)
    if found is None:
        typer.echo(f"securedev guard: project not found: {project}", err=True)
        raise typer.Exit(code=0)

    phase = "pre" if pre else "post"
    typer.echo(f"securedev: {phase}-run security check for {project}")

    try:
        result = run_scan(found.project_path)
    except Exception as exc:
        logger.exception("Guard scan of %s failed", project)
        typer.echo(f"securedev: scan error: {exc}", err=True)
        raise typer.Exit(code=0)

    save_report(result)
    blocking = blocking_findings(result, level)
    if blocking:
        typer.echo(f"securedev: BLOCKED - {len(blocking)} {level}+ finding(s):", err=True)
        for f in blocking[:GUARD_LISTED_FINDINGS]:
            where = f" ({f.file})" if f.file else ""
            typer.echo(f"  [{f.severity.value}] {f.title}{where}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"securedev: OK - Score {result.score} ({result.score_numeric}/100), no blocking issues")


@app.command("config")
def configure(
    workspace: Optional[str] = typer.Option(None, "--workspace", help="Workspace root path."),
    block_on: Optional[str] = typer.Option(None, "--block-on", help="CRITICAL or HIGH."),
    show: bool = typer.Option(False, "--show", help="Print the current configuration."),
) -> None:
    """Show or update the persisted configuration."""
    config = load_config()
    if show:
        typer.echo(json.dumps(config.model_dump(), indent=2))
        return

    updates = {}
    if workspace is not None:
        updates["workspace_root"] = workspace
    level = _normalize_block_on(block_on)
    if level is not None:
        updates["block_on_severity"] = level

    path = save_config(config.model_copy(update=updates))
    typer.echo(f"Config saved to {path}")


def main() -> None:
    """Entry point for the `securedev` console script."""
    app()


if __name__ == "__main__":
    main()
