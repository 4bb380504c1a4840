"""
Report persistence and SECURITY.md rendering.

Each scan is written once as a JSON snapshot named ``<project>-<date>.json``
in the reports directory (``~/.securedev/reports``, or
``$SECUREDEV_HOME/reports``). A later scan on the same day replaces that
day's snapshot; it never edits an older one.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from securedev.findings.models import Finding, ScanResult, Severity

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "SECUREDEV_HOME"
SECURITY_MD = "SECURITY.md"


def reports_dir() -> Path:
    home = os.environ.get(HOME_ENV_VAR)
    base = Path(home).expanduser() if home else Path.home() / ".securedev"
    return base / "reports"


def save_report(result: ScanResult, directory: Optional[Path] = None) -> Path:
    """Write the result as JSON and return the file path."""
    directory = directory or reports_dir()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{result.project}-{result.scanned_at.date().isoformat()}.json"
    path.write_text(result.model_dump_json(indent=2), encoding="utf-8")
    logger.debug("Saved report %s", path)
    return path


def load_latest_report(project: str, directory: Optional[Path] = None) -> Optional[ScanResult]:
    """Most recent snapshot for a project, or None when there is none usable."""
    directory = directory or reports_dir()
    if not directory.is_dir():
        return None

    # "api" must not pick up reports of "api-gateway"
    name_re = re.compile(rf"{re.escape(project)}-\d{{4}}-\d{{2}}-\d{{2}}\.json")
    candidates = sorted(
        (p for p in directory.iterdir() if name_re.fullmatch(p.name)),
        key=lambda p: p.name,
        reverse=True,
    )
    if not candidates:
        return None
    try:
        return ScanResult.model_validate_json(candidates[0].read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.warning("Could not load report %s: %s", candidates[0], e)
        return None


def _where(finding: Finding) -> str:
    return finding.location or "n/a"


def render_security_md(result: ScanResult) -> str:
    """Markdown summary of a scan, suitable for committing as SECURITY.md."""
    by_severity = {
        severity: [f for f in result.findings if f.severity is severity]
        for severity in (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM)
    }
    summary = result.summary

    out = [
        f"# Security Status - {result.project}",
        "",
        f"> Last scanned: {result.scanned_at.date().isoformat()} by securedev",
        f"> Score: **{result.score}** ({result.score_numeric}/100)",
        "",
        "## Summary",
        "",
        "| Severity | Count |",
        "|----------|-------|",
        f"| CRITICAL | {summary.critical} |",
        f"| HIGH | {summary.high} |",
        f"| MEDIUM | {summary.medium} |",
        f"| LOW | {summary.low} |",
        f"| INFO | {summary.info} |",
        "",
    ]

    if by_severity[Severity.CRITICAL]:
        out += ["## Critical Issues (MUST FIX)", ""]
        for f in by_severity[Severity.CRITICAL]:
            out += [
                f"### {f.title}",
                f"- **File:** {_where(f)}",
                f"- **Description:** {f.description}",
                f"- **Remediation:** {f.remediation or 'See security documentation'}",
                "",
            ]

    if by_severity[Severity.HIGH]:
        out += ["## High Severity", ""]
        out += [
            f"- **{f.title}** - {_where(f)} - {f.remediation or f.description}"
            for f in by_severity[Severity.HIGH]
        ]
        out.append("")

    if by_severity[Severity.MEDIUM]:
        out += ["## Medium Severity", ""]
        out += [f"- **{f.title}** - {_where(f)}" for f in by_severity[Severity.MEDIUM]]
        out.append("")

    out += ["---", f"*Regenerate: `securedev scan {result.project} --update-security-md`*", ""]
    return "\n".join(out)


def write_security_md(result: ScanResult, project_path: Path) -> Path:
    path = Path(project_path) / SECURITY_MD
    path.write_text(render_security_md(result), encoding="utf-8")
    return path
