"""Credential probing models."""

from typing import Any, Literal

from pydantic import Field

from leakscope.models.base import BaseSchema, ProbeState, ProbeStatus


class CandidateCredential(BaseSchema):
    """A key queued for probing, with where it came from."""

    key: str
    kind: Literal["anon", "service", "authenticated", "unknown"] = "unknown"
    source: Literal["current", "page_scan", "pattern", "manual"] = "current"


class ProbeAttempt(BaseSchema):
    """One network attempt with one credential."""

    credential: str
    status: ProbeStatus
    http_status: int | None = None
    discovered_resources: list[str] = Field(default_factory=list)
    error: str | None = None


class ProbeOutcome(BaseSchema):
    """Terminal state of an introspection probe."""

    base_url: str
    state: ProbeState = ProbeState.IDLE
    credential: str | None = None
    resources: list[str] = Field(default_factory=list)
    attempts: list[ProbeAttempt] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == ProbeState.SUCCESS


class ResourceReadOutcome(BaseSchema):
    """Terminal state of a resource read."""

    base_url: str
    resource: str
    state: ProbeState = ProbeState.IDLE
    credential: str | None = None
    rows: list[Any] | dict[str, Any] | None = None
    attempts: list[ProbeAttempt] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == ProbeState.SUCCESS

    @property
    def row_count(self) -> int:
        return len(self.rows) if isinstance(self.rows, list) else 0


class DumpOutcome(BaseSchema):
    """Every non-empty resource readable with one credential."""

    base_url: str
    state: ProbeState = ProbeState.IDLE
    credential: str | None = None
    tables: dict[str, list[Any]] = Field(default_factory=dict)
    attempts: list[ProbeAttempt] = Field(default_factory=list)

    @property
    def table_count(self) -> int:
        return len(self.tables)
