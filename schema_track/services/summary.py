"""Numeric roll-up of a diff."""

from schema_track.schemas.diff import ChangeSummary, Diff
from schema_track.services.breaking import is_breaking


def summarize(diff: Diff) -> ChangeSummary:
    """Count new, removed and modified tables plus every individual change entry.

    ``total_changes`` includes new and removed tables, not only the column
    changes of modified tables, so it is zero exactly when the diff is empty.
    """

    total_changes = len(diff.new_tables) + len(diff.removed_tables)
    for table_diff in diff.modified_tables.values():
        total_changes += table_diff.column_change_count + table_diff.index_change_count

    return ChangeSummary(
        total_changes=total_changes,
        new_tables=len(diff.new_tables),
        removed_tables=len(diff.removed_tables),
        modified_tables=len(diff.modified_tables),
        breaking_changes=is_breaking(diff),
    )
