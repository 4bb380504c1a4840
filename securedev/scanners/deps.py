"""
Dependency scanner: known-vulnerable packages reported by ``npm audit``.

Only Node projects are audited (a ``package.json`` at the project root).
``npm audit`` exits non-zero whenever it finds something, so the exit code
is ignored and stdout is parsed regardless. A missing npm binary, a timeout
or unparsable output all mean "no findings from this module".
"""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any, Optional

from securedev.findings.models import Finding, ScannerModule, Severity

logger = logging.getLogger(__name__)

NPM_AUDIT_TIMEOUT_SECONDS = 30

_NPM_SEVERITY = {
    "critical": Severity.CRITICAL,
    "high": Severity.HIGH,
    "moderate": Severity.MEDIUM,
    "low": Severity.LOW,
}


def map_npm_severity(severity: str) -> Severity:
    """npm's critical/high/moderate/low; anything else is INFO."""
    return _NPM_SEVERITY.get(severity.lower(), Severity.INFO)


def _describe_via(via: list[Any]) -> str:
    names = []
    for item in via:
        if isinstance(item, str):
            names.append(item)
        elif isinstance(item, dict):
            names.append(item.get("title") or item.get("url") or "")
    return ", ".join(name for name in names if name)


def parse_npm_audit(payload: dict[str, Any]) -> list[Finding]:
    """Turn ``npm audit --json`` output into findings, one per vulnerable package."""
    findings: list[Finding] = []
    vulnerabilities = payload.get("vulnerabilities") or {}
    for package, vuln in vulnerabilities.items():
        severity_name = str(vuln.get("severity", ""))
        via = _describe_via(vuln.get("via") or [])
        if vuln.get("fixAvailable"):
            remediation = "Run `npm audit fix` to apply available fixes."
        else:
            remediation = "No automatic fix available. Consider replacing or pinning the dependency."
        findings.append(
            Finding(
                module=ScannerModule.DEPS,
                severity=map_npm_severity(severity_name),
                title=f"Vulnerable dependency: {package}",
                description=(
                    f"{package} has a {severity_name} severity vulnerability. "
                    f"Via: {via or 'transitive'}"
                ),
                file="package.json",
                remediation=remediation,
            )
        )
    return findings


def run_npm_audit(project_path: Path) -> Optional[dict[str, Any]]:
    """Run ``npm audit --json`` in the project; None if it could not be run or parsed."""
    npm = shutil.which("npm")
    if npm is None:
        logger.warning("npm not found on PATH; skipping dependency audit for %s", project_path)
        return None

    try:
        proc = subprocess.run(
            [npm, "audit", "--json"],
            cwd=project_path,
            capture_output=True,
            text=True,
            timeout=NPM_AUDIT_TIMEOUT_SECONDS,
        )
    except subprocess.TimeoutExpired:
        logger.warning("npm audit timed out after %ds in %s", NPM_AUDIT_TIMEOUT_SECONDS, project_path)
        return None
    except OSError as e:
        logger.warning("npm audit could not be started in %s: %s", project_path, e)
        return None

    try:
        payload = json.loads(proc.stdout)
    except json.JSONDecodeError:
        logger.warning("npm audit produced unparsable output (exit %d) in %s", proc.returncode, project_path)
        return None
    return payload if isinstance(payload, dict) else None


def scan_deps(project_path: str | Path) -> list[Finding]:
    root = Path(project_path)
    if not (root / "package.json").exists():
        logger.debug("No package.json in %s; dependency audit skipped", root)
        return []

    payload = run_npm_audit(root)
    if payload is None:
        return []
    findings = parse_npm_audit(payload)
    logger.info("deps: %d vulnerable package(s) in %s", len(findings), root)
    return findings


async def scan(project_path: str | Path) -> list[Finding]:
    return await asyncio.to_thread(scan_deps, project_path)
