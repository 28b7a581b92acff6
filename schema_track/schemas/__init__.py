"""Pydantic schemas for snapshots, diffs and API payloads."""

from schema_track.schemas.diff import ChangeSummary, Diff, FieldChange, TableDiff
from schema_track.schemas.snapshot import (
    ColumnDefinition,
    ForeignKeyDefinition,
    IndexDefinition,
    Snapshot,
    TableDefinition,
)

__all__ = [
    "ChangeSummary",
    "ColumnDefinition",
    "Diff",
    "FieldChange",
    "ForeignKeyDefinition",
    "IndexDefinition",
    "Snapshot",
    "TableDefinition",
    "TableDiff",
]
