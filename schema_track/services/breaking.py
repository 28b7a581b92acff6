"""Breaking-change classification.

`is_breaking` applies the fixed deployment policy. `breaking_warnings` turns the
configured ``warn_on`` categories into advisory messages and never changes the
classification.
"""

from __future__ import annotations

from collections.abc import Iterable

from schema_track.schemas.diff import Diff

BREAKING_COLUMN_CHANGES: tuple[str, ...] = ("type_changed", "nullable_changed")


def is_breaking(diff: Diff) -> bool:
    """Return True when the diff is unsafe to deploy without coordination."""

    if diff.removed_tables:
        return True

    for table_diff in diff.modified_tables.values():
        if table_diff.removed_columns:
            return True

    for table_diff in diff.modified_tables.values():
        for modifications in table_diff.modified_columns.values():
            if any(key in modifications for key in BREAKING_COLUMN_CHANGES):
                return True

    return False


def breaking_warnings(diff: Diff, warn_on: Iterable[str]) -> list[str]:
    """Describe the changes that fall into the configured warning categories."""

    categories = set(warn_on)
    warnings: list[str] = []

    if "table_removal" in categories:
        warnings.extend(f"Table `{table}` was removed" for table in diff.removed_tables)

    for table, table_diff in diff.modified_tables.items():
        if "column_removal" in categories:
            warnings.extend(f"Column `{table}.{column}` was removed" for column in table_diff.removed_columns)

        for column, modifications in table_diff.modified_columns.items():
            type_change = modifications.get("type_changed")
            if "type_changes" in categories and type_change is not None:
                warnings.append(
                    f"Column `{table}.{column}` changed type from {type_change.from_} to {type_change.to}"
                )
            nullable_change = modifications.get("nullable_changed")
            if (
                "nullable_to_not_null" in categories
                and nullable_change is not None
                and nullable_change.from_ is True
                and nullable_change.to is False
            ):
                warnings.append(f"Column `{table}.{column}` is no longer nullable")

        if "unique_constraint_removal" in categories:
            for index, changes in table_diff.modified_indexes.items():
                unique_change = changes.get("is_unique_changed")
                if unique_change is not None and unique_change.from_ is True:
                    warnings.append(f"Index `{table}.{index}` is no longer unique")

    return warnings
