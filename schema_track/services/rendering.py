"""Report rendering for diffs and changelogs.

A renderer is chosen once per call through `get_renderer`; each output format
is a `ReportRenderer` strategy with three entry points:

- `render_diff`: a standalone diff report.
- `render_section`: one changelog block for an adjacent snapshot pair, headed
  by the two resolved timestamps.
- `render_document`: several sections joined under a title.

Sections with nothing in them are omitted, and modification keys are shown
without their ``_changed`` suffix.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
import json
from typing import Any, ClassVar

from schema_track.schemas.diff import ChangeSummary, Diff, FieldChanges, TableDiff, change_label
from schema_track.services.summary import summarize

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TEXT_RULE = "-" * 40


@dataclass(slots=True)
class ChangelogSection:
    """One adjacent snapshot pair in a changelog."""

    from_label: str
    to_label: str
    diff: Diff
    summary: ChangeSummary

    @classmethod
    def build(cls, diff: Diff, from_label: str, to_label: str) -> ChangelogSection:
        return cls(from_label=from_label, to_label=to_label, diff=diff, summary=summarize(diff))

    @property
    def heading(self) -> str:
        return f"Schema Changes ({self.from_label} → {self.to_label})"


class ReportRenderer(ABC):
    """Output format strategy."""

    format_name: ClassVar[str]

    @abstractmethod
    def render_diff(self, diff: Diff) -> str:
        """Render a standalone diff report."""

    @abstractmethod
    def render_section(self, section: ChangelogSection) -> str:
        """Render one changelog block."""

    @abstractmethod
    def render_document(
        self,
        title: str,
        sections: Sequence[ChangelogSection],
        generated_at: datetime | None = None,
    ) -> str:
        """Render several changelog blocks under one title."""


class TextRenderer(ReportRenderer):
    format_name = "text"

    def render_diff(self, diff: Diff) -> str:
        return _underlined("Schema Diff Report") + self._body(diff)

    def render_section(self, section: ChangelogSection) -> str:
        return _underlined(section.heading) + self._body(section.diff)

    def render_document(
        self,
        title: str,
        sections: Sequence[ChangelogSection],
        generated_at: datetime | None = None,
    ) -> str:
        output = _underlined(title)
        if generated_at is not None:
            output += f"Generated on: {generated_at.strftime(TIMESTAMP_FORMAT)}\n\n"
        for section in sections:
            output += self.render_section(section) + f"\n{TEXT_RULE}\n\n"
        return output

    def _body(self, diff: Diff) -> str:
        if diff.is_empty:
            return "No schema changes.\n"

        output = ""
        if diff.new_tables:
            output += "New Tables:\n"
            output += "".join(f"  + {table}\n" for table in diff.new_tables)
            output += "\n"

        if diff.removed_tables:
            output += "Removed Tables:\n"
            output += "".join(f"  - {table}\n" for table in diff.removed_tables)
            output += "\n"

        if diff.modified_tables:
            output += "Modified Tables:\n"
            for table, changes in diff.modified_tables.items():
                output += f"  {table}:\n"
                output += self._table_lines(changes)
            output += "\n"
        return output

    @staticmethod
    def _table_lines(changes: TableDiff) -> str:
        output = ""
        output += "".join(f"    + Added: {column}\n" for column in changes.new_columns)
        output += "".join(f"    - Removed: {column}\n" for column in changes.removed_columns)
        for column, modifications in changes.modified_columns.items():
            for key in modifications:
                output += f"    ~ Changed: {column} ({change_label(key)})\n"
        output += "".join(f"    + Added index: {index}\n" for index in changes.new_indexes)
        output += "".join(f"    - Removed index: {index}\n" for index in changes.removed_indexes)
        for index, modifications in changes.modified_indexes.items():
            for key in modifications:
                output += f"    ~ Changed index: {index} ({change_label(key)})\n"
        return output


class MarkdownRenderer(ReportRenderer):
    format_name = "markdown"

    def render_diff(self, diff: Diff) -> str:
        return "# Schema Changes\n\n" + self._body(diff, summarize(diff), level=2)

    def render_section(self, section: ChangelogSection) -> str:
        return f"## {section.heading}\n\n" + self._body(section.diff, section.summary, level=3)

    def render_document(
        self,
        title: str,
        sections: Sequence[ChangelogSection],
        generated_at: datetime | None = None,
    ) -> str:
        output = f"# {title}\n\n"
        if generated_at is not None:
            output += f"Generated on: {generated_at.strftime(TIMESTAMP_FORMAT)}\n\n"
        for section in sections:
            output += self.render_section(section) + "\n---\n\n"
        return output

    def _body(self, diff: Diff, summary: ChangeSummary, *, level: int) -> str:
        heading = "#" * level
        output = ""
        if diff.new_tables:
            output += f"{heading} New Tables\n\n"
            output += "".join(f"- `{table}`\n" for table in diff.new_tables)
            output += "\n"

        if diff.removed_tables:
            output += f"{heading} Removed Tables\n\n"
            output += "".join(f"- `{table}`\n" for table in diff.removed_tables)
            output += "\n"

        if diff.modified_tables:
            output += f"{heading} Modified Tables\n\n"
            for table, changes in diff.modified_tables.items():
                output += f"{heading}# `{table}`\n\n"
                output += _markdown_names("Added Columns", changes.new_columns)
                output += _markdown_names("Removed Columns", changes.removed_columns)
                output += _markdown_modifications("Modified Columns", changes.modified_columns)
                output += _markdown_names("Added Indexes", changes.new_indexes)
                output += _markdown_names("Removed Indexes", changes.removed_indexes)
                output += _markdown_modifications("Modified Indexes", changes.modified_indexes)

        output += f"{heading} Summary\n\n"
        output += f"- **Total Changes**: {summary.total_changes}\n"
        output += f"- **New Tables**: {summary.new_tables}\n"
        output += f"- **Removed Tables**: {summary.removed_tables}\n"
        output += f"- **Modified Tables**: {summary.modified_tables}\n"
        output += f"- **Breaking Changes**: {'Yes' if summary.breaking_changes else 'No'}\n"
        return output


class JsonRenderer(ReportRenderer):
    format_name = "json"

    def render_diff(self, diff: Diff) -> str:
        return _dumps(_diff_payload(diff))

    def render_section(self, section: ChangelogSection) -> str:
        return _dumps(_section_payload(section))

    def render_document(
        self,
        title: str,
        sections: Sequence[ChangelogSection],
        generated_at: datetime | None = None,
    ) -> str:
        return _dumps(
            {
                "title": title,
                "generated_at": generated_at.isoformat() if generated_at is not None else None,
                "changelog": [_section_payload(section) for section in sections],
            }
        )


RENDERERS: dict[str, ReportRenderer] = {
    renderer.format_name: renderer for renderer in (TextRenderer(), MarkdownRenderer(), JsonRenderer())
}


def get_renderer(fmt: str) -> ReportRenderer:
    """Return the renderer for ``fmt`` (text, markdown or json)."""

    renderer = RENDERERS.get(fmt.lower())
    if renderer is None:
        raise ValueError(f"Unsupported format: {fmt!r}. Expected one of: {', '.join(RENDERERS)}")
    return renderer


def render_diff(diff: Diff, fmt: str = "text") -> str:
    """Render a diff report."""

    return get_renderer(fmt).render_diff(diff)


def render_changelog(diff: Diff, from_label: str, to_label: str, fmt: str = "markdown") -> str:
    """Render one changelog block headed by the two snapshot timestamps."""

    return get_renderer(fmt).render_section(ChangelogSection.build(diff, from_label, to_label))


def render_changelog_document(
    title: str,
    sections: Sequence[ChangelogSection],
    fmt: str = "markdown",
    generated_at: datetime | None = None,
) -> str:
    """Render consecutive changelog blocks under one title."""

    return get_renderer(fmt).render_document(title, sections, generated_at)


def _underlined(title: str) -> str:
    return f"{title}\n{'=' * len(title)}\n\n"


def _markdown_names(label: str, names: Sequence[str]) -> str:
    if not names:
        return ""
    return f"**{label}:**\n" + "".join(f"- `{name}`\n" for name in names) + "\n"


def _markdown_modifications(label: str, modified: dict[str, FieldChanges]) -> str:
    if not modified:
        return ""
    output = f"**{label}:**\n"
    for name, modifications in modified.items():
        output += f"- `{name}`:\n"
        for key, change in modifications.items():
            output += (
                f"  - **{change_label(key)}**: "
                f"`{_format_value(change.from_)}` → `{_format_value(change.to)}`\n"
            )
    return output + "\n"


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def _diff_payload(diff: Diff) -> dict[str, Any]:
    return diff.model_dump(mode="json", by_alias=True)


def _section_payload(section: ChangelogSection) -> dict[str, Any]:
    return {
        "from": section.from_label,
        "to": section.to_label,
        "diff": _diff_payload(section.diff),
        "summary": section.summary.model_dump(mode="json"),
    }


def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=4, ensure_ascii=False)
