"""Snapshot data model: a named, point-in-time copy of a database schema."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

ColumnDefault = str | int | float | bool | None


class ColumnDefinition(BaseModel):
    """Captured column attributes."""

    model_config = ConfigDict(frozen=True)

    type: str
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    nullable: bool = True
    default: ColumnDefault = None
    auto_increment: bool = False
    unsigned: bool = False
    fixed: bool = False


class IndexDefinition(BaseModel):
    """Captured index (primary key and unique constraints included)."""

    model_config = ConfigDict(frozen=True)

    columns: list[str] = Field(default_factory=list)
    is_unique: bool = False
    is_primary: bool = False


class ForeignKeyDefinition(BaseModel):
    """Captured foreign key constraint."""

    model_config = ConfigDict(frozen=True)

    local_columns: list[str] = Field(default_factory=list)
    foreign_table: str
    foreign_columns: list[str] = Field(default_factory=list)
    on_delete: str = "NO ACTION"
    on_update: str = "NO ACTION"


class TableDefinition(BaseModel):
    """Captured table structure keyed by column, index and foreign key names."""

    model_config = ConfigDict(frozen=True)

    columns: dict[str, ColumnDefinition] = Field(default_factory=dict)
    indexes: dict[str, IndexDefinition] = Field(default_factory=dict)
    foreign_keys: dict[str, ForeignKeyDefinition] = Field(default_factory=dict)


SchemaTables = dict[str, TableDefinition]


class Snapshot(BaseModel):
    """Immutable, named schema snapshot.

    The table mapping is serialized under the ``schema`` key; in Python it is
    exposed as ``tables`` so it does not shadow ``BaseModel`` attributes.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    timestamp: datetime
    database: str
    tables: SchemaTables = Field(default_factory=dict, alias="schema")

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def table_count(self) -> int:
        return len(self.tables)
