"""
Scan orchestration: run every scanner module against a project and score it.

Modules run concurrently and share nothing; each collects its own files.
A module that raises is logged and contributes no findings, the rest of the
scan carries on.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from securedev.findings.models import Finding, ScanResult
from securedev.scanners import auth, deps, patterns, secrets
from securedev.scoring import compute_score, summarize

logger = logging.getLogger(__name__)

ScannerFn = Callable[[Path], Awaitable[list[Finding]]]

DEFAULT_SCANNERS: tuple[tuple[str, ScannerFn], ...] = (
    ("secrets", secrets.scan),
    ("deps", deps.scan),
    ("patterns", patterns.scan),
    ("auth", auth.scan),
)


async def gather_findings(
    project_path: Path,
    scanners: Sequence[tuple[str, ScannerFn]] = DEFAULT_SCANNERS,
) -> list[Finding]:
    """Run scanners concurrently; findings are merged in scanner order."""
    results = await asyncio.gather(
        *(scan(project_path) for _, scan in scanners),
        return_exceptions=True,
    )

    findings: list[Finding] = []
    for (name, _), result in zip(scanners, results):
        if isinstance(result, BaseException):
            logger.warning("Scanner %s failed on %s: %s", name, project_path, result)
            continue
        findings.extend(result)
    return findings


async def scan_project(
    project_path: str | Path,
    scanners: Optional[Sequence[tuple[str, ScannerFn]]] = None,
    extra_scanners: Sequence[tuple[str, ScannerFn]] = (),
) -> ScanResult:
    """
    Scan one project and build its ScanResult.

    Args:
        project_path: Project root directory.
        scanners: Replaces the default scanner modules when given.
        extra_scanners: Appended to the scanner list (e.g. an optional
                        threat-model module).
    """
    start = time.monotonic()
    root = Path(project_path).resolve()
    selected = list(scanners if scanners is not None else DEFAULT_SCANNERS) + list(extra_scanners)

    logger.info("Scanning %s with %d module(s)", root, len(selected))
    findings = await gather_findings(root, selected)
    score = compute_score(findings)

    return ScanResult(
        project=root.name,
        project_path=str(root),
        scanned_at=datetime.now(timezone.utc),
        score=score.grade,
        score_numeric=score.numeric,
        findings=findings,
        summary=summarize(findings),
        duration_ms=int((time.monotonic() - start) * 1000),
    )


def run_scan(project_path: str | Path, **kwargs) -> ScanResult:
    """Blocking wrapper around scan_project() for the CLI."""
    return asyncio.run(scan_project(project_path, **kwargs))
