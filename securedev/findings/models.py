# Pydantic data models for scan output: Finding, Severity, ScanSummary, ScanResult.

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class Severity(str, Enum):
    """Finding severity, most severe first. INFO never affects the score."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @property
    def rank(self) -> int:
        """0 for CRITICAL up to 4 for INFO."""
        return SEVERITY_ORDER.index(self)


SEVERITY_ORDER: tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.INFO,
)


class ScannerModule(str, Enum):
    """Which scanner produced a finding."""

    SECRETS = "secrets"
    DEPS = "deps"
    PATTERNS = "patterns"
    AUTH = "auth"
    THREAT_MODEL = "threat-model"


Grade = Literal["A", "B", "C", "D", "F"]


class Finding(BaseModel):
    """A single issue reported by a scanner (e.g. an API key at config.py:12)."""

    module: ScannerModule
    severity: Severity
    title: str = Field(..., description="Stable per rule; used for per-file rate limiting")
    description: str
    file: Optional[str] = Field(None, description="Project-relative path, forward slashes")
    line: Optional[int] = Field(None, ge=1, description="1-based line number")
    remediation: Optional[str] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _line_requires_file(self) -> "Finding":
        if self.file is None and self.line is not None:
            raise ValueError("a finding without a file cannot carry a line number")
        return self

    @property
    def location(self) -> str:
        """`file:line`, `file`, or an empty string."""
        if self.file is None:
            return ""
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"


class ScanSummary(BaseModel):
    """Finding counts per severity."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0

    def count(self, severity: Severity) -> int:
        return getattr(self, severity.value.lower())


class ScanResult(BaseModel):
    """One orchestrator run. Persisted as-is and never updated."""

    project: str
    project_path: str
    scanned_at: datetime
    score: Grade
    score_numeric: int = Field(..., ge=0, le=100)
    findings: list[Finding] = Field(default_factory=list)
    summary: ScanSummary = Field(default_factory=ScanSummary)
    duration_ms: int = Field(0, ge=0)

    model_config = {"frozen": True}
