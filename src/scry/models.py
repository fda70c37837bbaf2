"""Pydantic models for scry scan results."""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity levels for findings, ordered high > medium > low."""

    high = "high"
    medium = "medium"
    low = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def meets(self, minimum: "Severity") -> bool:
        """Return True if this severity is at or above ``minimum``."""
        return self.rank >= Severity(minimum).rank


_SEVERITY_RANK = {
    Severity.high: 3,
    Severity.medium: 2,
    Severity.low: 1,
}

OutputFormat = Literal["table", "json", "markdown", "compact"]


class Finding(BaseModel):
    """A single reported occurrence of a detected pattern."""

    model_config = ConfigDict(frozen=True)

    rule: str = Field(description="Id of the rule that produced the finding")
    severity: Severity = Field(description="Severity level")
    file: str = Field(description="File path where the issue was found")
    line: int = Field(description="1-based line number")
    column: Optional[int] = Field(default=None, description="1-based column of the match start")
    message: str = Field(description="Short human-readable description")
    snippet: str = Field(default="", description="Trimmed source line containing the match")
    explanation: str = Field(default="", description="Why this pattern is a security risk")
    fix: str = Field(default="", description="How to remediate the issue")
    tags: Optional[list[str]] = Field(default=None, description="Rule tags")


class SkippedFile(BaseModel):
    """A file that could not be scanned."""

    path: str = Field(description="Path of the skipped file")
    reason: str = Field(description="Why the file was skipped")


class RuleFailure(BaseModel):
    """A rule that raised while checking one file."""

    file: str = Field(description="File the rule was checking")
    rule: str = Field(description="Id of the failing rule")
    reason: str = Field(description="Error message")


class ScanResult(BaseModel):
    """Aggregated result of one scan invocation."""

    findings: list[Finding] = Field(default_factory=list, description="Findings in deterministic order")
    files_scanned: int = Field(default=0, description="Number of files read and checked")
    files_skipped: int = Field(default=0, description="Number of files that could not be read")
    skipped_files: list[SkippedFile] = Field(default_factory=list, description="Skipped files with reasons")
    rule_failures: list[RuleFailure] = Field(
        default_factory=list, description="Rules that failed on a file and contributed no findings"
    )
    duration_ms: int = Field(default=0, description="Wall-clock scan duration in milliseconds")
    cancelled: bool = Field(default=False, description="Whether the scan stopped early on request")


class FindingStats(BaseModel):
    """Summary counts over a list of findings."""

    total: int = Field(default=0, description="Total number of findings")
    by_rule: dict[str, int] = Field(default_factory=dict, description="Finding count per rule id")
    by_severity: dict[str, int] = Field(
        default_factory=lambda: {"high": 0, "medium": 0, "low": 0},
        description="Finding count per severity",
    )


class ScanRequest(BaseModel):
    """Request body for scanning a local path."""

    path: str = Field(description="File or directory to scan")
    min_severity: Optional[Severity] = Field(default=None, description="Minimum severity to report")
    rules: dict[str, bool] = Field(default_factory=dict, description="Rule id -> enabled overrides")
    ignore: list[str] = Field(default_factory=list, description="Additional glob patterns to ignore")
    extensions: Optional[list[str]] = Field(default=None, description="File extensions to scan")
