"""Structural diff and summary models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CHANGED_SUFFIX = "_changed"


class FieldChange(BaseModel):
    """One attribute that differs between two snapshots; serialized as ``{from, to}``."""

    model_config = ConfigDict(populate_by_name=True)

    from_: Any = Field(default=None, alias="from")
    to: Any = None


FieldChanges = dict[str, FieldChange]


class TableDiff(BaseModel):
    """Differences inside one table present in both snapshots.

    Index fields stay empty unless index comparison is enabled.
    """

    new_columns: list[str] = Field(default_factory=list)
    removed_columns: list[str] = Field(default_factory=list)
    modified_columns: dict[str, FieldChanges] = Field(default_factory=dict)
    new_indexes: list[str] = Field(default_factory=list)
    removed_indexes: list[str] = Field(default_factory=list)
    modified_indexes: dict[str, FieldChanges] = Field(default_factory=dict)

    @property
    def column_change_count(self) -> int:
        return len(self.new_columns) + len(self.removed_columns) + len(self.modified_columns)

    @property
    def index_change_count(self) -> int:
        return len(self.new_indexes) + len(self.removed_indexes) + len(self.modified_indexes)

    @property
    def has_changes(self) -> bool:
        return bool(self.column_change_count or self.index_change_count)


class Diff(BaseModel):
    """Structural delta between two schemas."""

    new_tables: list[str] = Field(default_factory=list)
    removed_tables: list[str] = Field(default_factory=list)
    modified_tables: dict[str, TableDiff] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.new_tables or self.removed_tables or self.modified_tables)


class ChangeSummary(BaseModel):
    """Numeric roll-up of a diff."""

    total_changes: int = 0
    new_tables: int = 0
    removed_tables: int = 0
    modified_tables: int = 0
    breaking_changes: bool = False


def change_label(key: str) -> str:
    """Strip the ``_changed`` suffix from a modification key."""

    if key.endswith(CHANGED_SUFFIX):
        return key[: -len(CHANGED_SUFFIX)]
    return key
