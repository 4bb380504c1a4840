"""
Rule engine shared by the secrets and insecure-pattern scanners.

For every file, each applicable rule's regex is run over the whole content
(so patterns may span line boundaries). Each match is mapped back to its
1-based line, passed through the rule set's suppression stages, and turned
into a Finding. Findings in test-fixture files are downgraded to INFO.

Output order is file order, then rule-table order, then position in the file,
so two runs over the same tree produce identical lists.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from securedev.findings.models import Finding
from securedev.rules.base import DetectionRule, RuleSet
from securedev.suppressions import (
    Candidate,
    Reclassify,
    SuppressionPolicy,
    Verdict,
    as_test_fixture_finding,
    is_test_fixture_file,
)
from securedev.traversal import relative_posix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceText:
    """File content kept twice: raw for regex search, split for line lookup."""

    content: str
    lines: list[str]
    line_starts: list[int]

    @classmethod
    def from_content(cls, content: str) -> "SourceText":
        lines = content.split("\n")
        starts = [0]
        for line in lines[:-1]:
            starts.append(starts[-1] + len(line) + 1)
        return cls(content=content, lines=lines, line_starts=starts)

    def line_number_at(self, offset: int) -> int:
        """1-based line containing ``offset``."""
        return bisect.bisect_right(self.line_starts, offset)

    def line_text(self, line_number: int) -> str:
        if 1 <= line_number <= len(self.lines):
            return self.lines[line_number - 1]
        return ""

    def rest_of_line(self, offset: int) -> str:
        """Text from ``offset`` up to the end of its line."""
        end = self.content.find("\n", offset)
        return self.content[offset:] if end == -1 else self.content[offset:end]


def read_source(path: Path) -> Optional[str]:
    """
    Read a file as UTF-8 without newline translation.

    Invalid bytes are replaced rather than rejected. Returns None when the
    file cannot be read at all.
    """
    try:
        with path.open("r", encoding="utf-8", errors="replace", newline="") as fh:
            return fh.read()
    except OSError as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return None


def _build_finding(
    ruleset: RuleSet,
    rule: DetectionRule,
    candidate: Candidate,
    outcome: Verdict | Reclassify,
) -> Finding:
    if isinstance(outcome, Reclassify):
        return Finding(
            module=ruleset.module,
            severity=outcome.severity,
            title=outcome.title,
            description=outcome.description,
            file=candidate.rel_path,
            line=candidate.line_number,
            remediation=outcome.remediation,
        )
    return Finding(
        module=ruleset.module,
        severity=rule.severity,
        title=rule.title,
        description=ruleset.describe(candidate),
        file=candidate.rel_path,
        line=candidate.line_number,
        remediation=rule.remediation,
    )


def scan_content(content: str, rel_path: str, ruleset: RuleSet) -> list[Finding]:
    """
    Apply a rule set to one file's content.

    Args:
        content: Full file text.
        rel_path: Project-relative, forward-slash path used in findings and
                  for fixture / extension decisions.
        ruleset: Rules, per-rule cap and suppression stages to use.

    Returns:
        Findings in rule-table order, then in order of appearance.
    """
    if not content:
        return []

    source = SourceText.from_content(content)
    policy = SuppressionPolicy(ruleset.stages)
    is_fixture = is_test_fixture_file(rel_path, content)
    extension = Path(rel_path).suffix.lower()

    findings: list[Finding] = []
    for rule in ruleset.rules:
        if not rule.applies_to(extension):
            continue

        emitted = 0
        for match in rule.pattern.finditer(content):
            if emitted >= ruleset.max_findings_per_rule:
                break

            start = match.start()
            line_number = source.line_number_at(start)
            candidate = Candidate(
                rule=rule,
                rel_path=rel_path,
                line_number=line_number,
                line_text=source.line_text(line_number),
                match_text=match.group(0),
                preceding_char=content[start - 1] if start > 0 else "",
                rest_of_line=source.rest_of_line(match.end()),
            )

            outcome = policy.evaluate(candidate)
            if outcome is Verdict.DROP:
                continue

            finding = _build_finding(ruleset, rule, candidate, outcome)
            if is_fixture:
                finding = as_test_fixture_finding(finding)
            findings.append(finding)

            # Reclassified findings do not count toward the rule's cap
            if not isinstance(outcome, Reclassify):
                emitted += 1

    return findings


def apply_rules(files: Iterable[Path], ruleset: RuleSet, project_root: Path) -> list[Finding]:
    """
    Run a rule set over collected files.

    Unreadable files are skipped silently (logged at DEBUG); they are not
    reported as findings.
    """
    root = project_root.resolve()
    findings: list[Finding] = []
    scanned = 0
    for path in files:
        content = read_source(path)
        if content is None:
            continue
        scanned += 1
        rel_path = relative_posix(path.resolve(), root)
        findings.extend(scan_content(content, rel_path, ruleset))

    logger.info(
        "%s rules: %d finding(s) in %d file(s)",
        ruleset.module.value,
        len(findings),
        scanned,
    )
    return findings
