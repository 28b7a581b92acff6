"""HTTP response schemas."""

from datetime import datetime
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

from schema_track.schemas.diff import ChangeSummary, Diff
from schema_track.schemas.snapshot import Snapshot

T = TypeVar("T")

ReportFormat = Literal["text", "markdown", "json"]


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope shared by every route."""

    data: T


class SnapshotListItem(BaseModel):
    """Snapshot row without the table payload."""

    name: str
    timestamp: datetime
    database: str
    table_count: int

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "SnapshotListItem":
        return cls(
            name=snapshot.name,
            timestamp=snapshot.timestamp,
            database=snapshot.database,
            table_count=snapshot.table_count,
        )


class DiffReport(BaseModel):
    """Diff between two resolved snapshots plus its summary."""

    from_snapshot: str
    to_snapshot: str
    diff: Diff
    summary: ChangeSummary


class ChangelogRead(BaseModel):
    """Rendered changelog content."""

    format: ReportFormat
    content: str
