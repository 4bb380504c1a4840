"""Shared plumbing for the rule-driven scanners (secrets, patterns)."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from securedev.engine import apply_rules
from securedev.findings.models import Finding
from securedev.ignore_rules import load_ignore_rules
from securedev.rules.base import RuleSet
from securedev.traversal import collect_files

logger = logging.getLogger(__name__)


def run_ruleset(project_path: str | Path, ruleset: RuleSet) -> list[Finding]:
    """Collect the project's files for this rule set and apply its rules."""
    root = Path(project_path).resolve()
    is_ignored = load_ignore_rules(root)
    files = collect_files(
        root,
        ruleset.extensions,
        is_ignored,
        include_env_files=ruleset.include_env_files,
    )
    return apply_rules(files, ruleset, root)


async def run_ruleset_async(project_path: str | Path, ruleset: RuleSet) -> list[Finding]:
    """Same as run_ruleset, off the event loop so scanners can overlap."""
    return await asyncio.to_thread(run_ruleset, project_path, ruleset)
