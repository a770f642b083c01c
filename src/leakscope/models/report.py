"""Finding and report models."""

from datetime import datetime

from pydantic import Field

from leakscope.models.base import BaseSchema, Severity, utc_now
from leakscope.models.scan import ScanResult


class Finding(BaseSchema):
    """Severity-tagged finding derived from a merged scan result."""

    id: str
    severity: Severity
    title: str
    description: str


class ScanReport(BaseSchema):
    """Merged result of one scan invocation plus its findings."""

    session_id: str
    url: str
    result: ScanResult
    findings: list[Finding] = Field(default_factory=list)
    passes: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)

    @property
    def critical_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.CRITICAL)

    @property
    def total_findings(self) -> int:
        return len(self.findings)

    def to_json(self) -> str:
        """Export report as JSON string."""
        return self.model_dump_json(indent=2)


class HistoryEntry(BaseSchema):
    """Summary of a past scan, without any credential material."""

    timestamp: datetime = Field(default_factory=utc_now)
    url: str
    session_id: str | None = None
    detected: bool = False
    finding_count: int = 0
    critical_count: int = 0

    @classmethod
    def from_report(cls, report: ScanReport) -> "HistoryEntry":
        return cls(
            timestamp=report.generated_at,
            url=report.url,
            session_id=report.session_id,
            detected=report.result.detected,
            finding_count=report.total_findings,
            critical_count=report.critical_count,
        )
