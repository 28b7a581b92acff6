"""Diff engine: two schema snapshots -> structural diff.

Table, column and index sets are compared by name; members present on both
sides are compared attribute by attribute. Nothing here mutates its inputs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from pydantic import BaseModel

from schema_track.schemas.diff import CHANGED_SUFFIX, Diff, FieldChange, FieldChanges, TableDiff
from schema_track.schemas.snapshot import SchemaTables, Snapshot, TableDefinition

COMPARABLE_COLUMN_FIELDS: tuple[str, ...] = (
    "type",
    "length",
    "precision",
    "scale",
    "nullable",
    "default",
    "unsigned",
)
COMPARABLE_INDEX_FIELDS: tuple[str, ...] = ("columns", "is_unique", "is_primary")


@dataclass(frozen=True)
class DiffOptions:
    """Feature switches for which aspects to compare."""

    compare_indexes: bool = False


def compute_diff(
    from_snapshot: Snapshot,
    to_snapshot: Snapshot,
    options: DiffOptions | None = None,
) -> Diff:
    """Compute the structural diff between two snapshots."""

    return compute_schema_diff(from_snapshot.tables, to_snapshot.tables, options)


def compute_schema_diff(
    from_tables: SchemaTables,
    to_tables: SchemaTables,
    options: DiffOptions | None = None,
) -> Diff:
    """Compute the structural diff between two bare table mappings."""

    active_options = options or DiffOptions()
    new_tables, removed_tables, common_tables = _partition(from_tables, to_tables)

    modified_tables: dict[str, TableDiff] = {}
    for table_name in common_tables:
        table_diff = _diff_table(from_tables[table_name], to_tables[table_name], active_options)
        if table_diff.has_changes:
            modified_tables[table_name] = table_diff

    return Diff(
        new_tables=new_tables,
        removed_tables=removed_tables,
        modified_tables=modified_tables,
    )


def _diff_table(from_table: TableDefinition, to_table: TableDefinition, options: DiffOptions) -> TableDiff:
    new_columns, removed_columns, common_columns = _partition(from_table.columns, to_table.columns)
    modified_columns = _diff_members(
        from_table.columns, to_table.columns, common_columns, COMPARABLE_COLUMN_FIELDS
    )

    if not options.compare_indexes:
        return TableDiff(
            new_columns=new_columns,
            removed_columns=removed_columns,
            modified_columns=modified_columns,
        )

    new_indexes, removed_indexes, common_indexes = _partition(from_table.indexes, to_table.indexes)
    return TableDiff(
        new_columns=new_columns,
        removed_columns=removed_columns,
        modified_columns=modified_columns,
        new_indexes=new_indexes,
        removed_indexes=removed_indexes,
        modified_indexes=_diff_members(
            from_table.indexes, to_table.indexes, common_indexes, COMPARABLE_INDEX_FIELDS
        ),
    )


def _partition(before: Mapping[str, object], after: Mapping[str, object]) -> tuple[list[str], list[str], list[str]]:
    """Split names into (added, removed, common), each in order of appearance."""

    added = [name for name in after if name not in before]
    removed = [name for name in before if name not in after]
    common = [name for name in before if name in after]
    return added, removed, common


def _diff_members(
    before: Mapping[str, BaseModel],
    after: Mapping[str, BaseModel],
    names: Sequence[str],
    fields: Sequence[str],
) -> dict[str, FieldChanges]:
    modified: dict[str, FieldChanges] = {}
    for name in names:
        changes = _diff_fields(before[name], after[name], fields)
        if changes:
            modified[name] = changes
    return modified


def _diff_fields(before: BaseModel, after: BaseModel, fields: Sequence[str]) -> FieldChanges:
    changes: FieldChanges = {}
    for field_name in fields:
        old_value = getattr(before, field_name, None)
        new_value = getattr(after, field_name, None)
        if not _strictly_equal(old_value, new_value):
            changes[f"{field_name}{CHANGED_SUFFIX}"] = FieldChange(from_=old_value, to=new_value)
    return changes


def _strictly_equal(left: object, right: object) -> bool:
    # 1 == True and 0 == 0.0 in Python; a changed value type is still a change.
    return type(left) is type(right) and left == right
