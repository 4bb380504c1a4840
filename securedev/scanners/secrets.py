"""Secrets scanner: leaked API keys, private keys and credentials."""

from __future__ import annotations

from pathlib import Path

from securedev.findings.models import Finding
from securedev.rules.secrets import SECRETS_RULESET
from securedev.scanners.common import run_ruleset, run_ruleset_async


def scan_secrets(project_path: str | Path) -> list[Finding]:
    return run_ruleset(project_path, SECRETS_RULESET)


async def scan(project_path: str | Path) -> list[Finding]:
    return await run_ruleset_async(project_path, SECRETS_RULESET)
