"""SQLModel ORM models for database storage."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from leakscope.models.base import utc_now
from leakscope.models.report import HistoryEntry


class HistoryRecord(SQLModel, table=True):
    """Scan summary row. Holds counts only, never credential material."""

    __tablename__ = "scan_history"

    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)
    url: str = Field(index=True)
    session_id: str | None = None
    detected: bool = False
    finding_count: int = 0
    critical_count: int = 0

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryRecord":
        return cls(**entry.model_dump())

    def to_entry(self) -> HistoryEntry:
        return HistoryEntry(
            timestamp=self.timestamp,
            url=self.url,
            session_id=self.session_id,
            detected=self.detected,
            finding_count=self.finding_count,
            critical_count=self.critical_count,
        )
