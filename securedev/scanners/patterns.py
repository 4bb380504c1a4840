"""Insecure-pattern scanner: injection, XSS, eval and similar code smells."""

from __future__ import annotations

from pathlib import Path

from securedev.findings.models import Finding
from securedev.rules.patterns import PATTERNS_RULESET
from securedev.scanners.common import run_ruleset, run_ruleset_async


def scan_patterns(project_path: str | Path) -> list[Finding]:
    return run_ruleset(project_path, PATTERNS_RULESET)


async def scan(project_path: str | Path) -> list[Finding]:
    return await run_ruleset_async(project_path, PATTERNS_RULESET)
