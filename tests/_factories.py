"""Builders for snapshot fixtures shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timezone

from schema_track.extraction.extractor_interface import SchemaExtractor
from schema_track.schemas.snapshot import ColumnDefinition, IndexDefinition, SchemaTables, Snapshot, TableDefinition

BASE_TIME = datetime(2024, 1, 10, 12, 0, 0, tzinfo=timezone.utc)


def column(type_: str = "varchar", **overrides) -> ColumnDefinition:
    return ColumnDefinition(type=type_, **overrides)


def users_table(**name_overrides) -> TableDefinition:
    name_attrs = {"length": 255, "nullable": False}
    name_attrs.update(name_overrides)
    name_type = name_attrs.pop("type", "varchar")
    return TableDefinition(
        columns={
            "id": column("integer", nullable=False, auto_increment=True),
            "name": column(name_type, **name_attrs),
            "email": column("varchar", length=255, nullable=False),
        },
        indexes={"primary": IndexDefinition(columns=["id"], is_unique=True, is_primary=True)},
    )


def posts_table() -> TableDefinition:
    return TableDefinition(
        columns={
            "id": column("integer", nullable=False, auto_increment=True),
            "title": column("varchar", length=200, nullable=False),
        }
    )


def comments_table() -> TableDefinition:
    return TableDefinition(
        columns={
            "id": column("integer", nullable=False, auto_increment=True),
            "content": column("text"),
        }
    )


def snapshot(name: str, tables: dict[str, TableDefinition], timestamp: datetime | None = None) -> Snapshot:
    return Snapshot(name=name, timestamp=timestamp or BASE_TIME, database="sqlite", tables=tables)


class StaticExtractor(SchemaExtractor):
    """Extractor returning a fixed table mapping."""

    def __init__(self, tables: SchemaTables, label: str = "sqlite") -> None:
        self.tables = tables
        self.label = label
        self.calls = 0

    @property
    def database_label(self) -> str:
        return self.label

    def extract(self) -> SchemaTables:
        self.calls += 1
        return self.tables
