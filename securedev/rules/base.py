# Rule data: DetectionRule (one regex + severity + remediation) and RuleSet (a scanner's table).
# Rules are plain immutable configuration; every rule is evaluated the same way by engine.apply_rules().

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from securedev.findings.models import ScannerModule, Severity
from securedev.suppressions import Candidate, Stage


@dataclass(frozen=True)
class DetectionRule:
    """
    A named pattern with the severity and fix it reports.

    Attributes:
    - name: human label (e.g. "AWS Access Key")
    - pattern: compiled regex searched over the whole file content
    - severity: nominal severity of a finding
    - remediation: fixed, actionable advice
    - extensions: lower-case extensions the rule applies to; None means every
      file the scanner collected
    - title: finding title; defaults to the name
    - allow_in_comments: still report matches on comment lines
    - local_dev_only: loopback database credentials are reclassified LOW
    """

    name: str
    pattern: re.Pattern[str]
    severity: Severity
    remediation: str
    extensions: Optional[frozenset[str]] = None
    title: str = ""
    allow_in_comments: bool = False
    local_dev_only: bool = False

    def __post_init__(self) -> None:
        if not self.title:
            object.__setattr__(self, "title", self.name)

    def applies_to(self, extension: str) -> bool:
        return self.extensions is None or extension.lower() in self.extensions


Describe = Callable[[Candidate], str]


@dataclass(frozen=True)
class RuleSet:
    """Everything one rule-driven scanner needs: its rules, limits and filters."""

    module: ScannerModule
    rules: tuple[DetectionRule, ...]
    max_findings_per_rule: int
    stages: tuple[Stage, ...]
    describe: Describe
    extensions: frozenset[str] = field(default_factory=frozenset)
    include_env_files: bool = False


def rule(
    name: str,
    pattern: str,
    severity: Severity,
    remediation: str,
    *,
    flags: int = 0,
    extensions: Optional[set[str]] = None,
    **kwargs,
) -> DetectionRule:
    """Shorthand for building table entries from a raw pattern string."""
    return DetectionRule(
        name=name,
        pattern=re.compile(pattern, flags),
        severity=severity,
        remediation=remediation,
        extensions=frozenset(extensions) if extensions is not None else None,
        **kwargs,
    )
