# Score aggregation: weighted severity penalty -> numeric score (0-100) and letter grade.

from __future__ import annotations

from typing import Iterable, NamedTuple

from securedev.findings.models import Finding, Grade, ScanSummary, Severity

# Points deducted per finding; INFO is score-neutral
PENALTY_WEIGHTS: dict[Severity, int] = {
    Severity.CRITICAL: 30,
    Severity.HIGH: 10,
    Severity.MEDIUM: 3,
    Severity.LOW: 1,
}

# Minimum numeric score per grade, checked top-down; anything lower is F
GRADE_THRESHOLDS: tuple[tuple[int, Grade], ...] = (
    (90, "A"),
    (75, "B"),
    (60, "C"),
    (40, "D"),
)


class Score(NamedTuple):
    grade: Grade
    numeric: int


def summarize(findings: Iterable[Finding]) -> ScanSummary:
    """Count findings per severity, INFO included."""
    counts = {severity.value.lower(): 0 for severity in Severity}
    for finding in findings:
        counts[finding.severity.value.lower()] += 1
    return ScanSummary(**counts)


def penalty(summary: ScanSummary) -> int:
    return sum(weight * summary.count(severity) for severity, weight in PENALTY_WEIGHTS.items())


def grade_for(numeric: int, has_critical: bool) -> Grade:
    """Letter grade; any CRITICAL finding is a hard F whatever the number says."""
    if has_critical:
        return "F"
    for threshold, grade in GRADE_THRESHOLDS:
        if numeric >= threshold:
            return grade
    return "F"


def compute_score(findings: Iterable[Finding]) -> Score:
    """
    Reduce findings to a grade and a 0-100 score.

    Examples:
        3 HIGH            -> penalty 30 -> Score("C", 70)
        1 CRITICAL        -> penalty 30 -> Score("F", 70)
        1 HIGH/MEDIUM/LOW -> penalty 14 -> Score("B", 86)
    """
    summary = summarize(findings)
    numeric = max(0, 100 - penalty(summary))
    return Score(grade=grade_for(numeric, summary.critical > 0), numeric=numeric)
