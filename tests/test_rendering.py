"""Unit tests for the text, markdown and JSON report renderers."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import unittest

from schema_track.schemas.diff import Diff, FieldChange, TableDiff
from schema_track.services.rendering import (
    ChangelogSection,
    get_renderer,
    render_changelog,
    render_changelog_document,
    render_diff,
)


def _mixed_diff() -> Diff:
    return Diff(
        new_tables=["comments"],
        removed_tables=["posts"],
        modified_tables={
            "users": TableDiff(
                modified_columns={"name": {"length_changed": FieldChange(from_=255, to=100)}}
            )
        },
    )


class TextRendererTests(unittest.TestCase):
    def test_renders_every_section(self) -> None:
        expected = (
            "Schema Diff Report\n"
            "==================\n"
            "\n"
            "New Tables:\n"
            "  + comments\n"
            "\n"
            "Removed Tables:\n"
            "  - posts\n"
            "\n"
            "Modified Tables:\n"
            "  users:\n"
            "    ~ Changed: name (length)\n"
            "\n"
        )

        self.assertEqual(render_diff(_mixed_diff(), "text"), expected)

    def test_omits_empty_sections(self) -> None:
        output = render_diff(Diff(new_tables=["comments"]), "text")

        self.assertIn("New Tables:", output)
        self.assertNotIn("Removed Tables:", output)
        self.assertNotIn("Modified Tables:", output)

    def test_added_and_removed_columns_are_listed(self) -> None:
        diff = Diff(
            modified_tables={"users": TableDiff(new_columns=["bio"], removed_columns=["legacy"])}
        )

        output = render_diff(diff, "text")

        self.assertIn("    + Added: bio\n", output)
        self.assertIn("    - Removed: legacy\n", output)

    def test_empty_diff_says_so(self) -> None:
        self.assertTrue(render_diff(Diff(), "text").endswith("No schema changes.\n"))

    def test_index_changes_are_listed(self) -> None:
        diff = Diff(
            modified_tables={
                "posts": TableDiff(
                    new_indexes=["posts_id_index"],
                    modified_indexes={"posts_title_unique": {"is_unique_changed": FieldChange(from_=True, to=False)}},
                )
            }
        )

        output = render_diff(diff, "text")

        self.assertIn("    + Added index: posts_id_index\n", output)
        self.assertIn("    ~ Changed index: posts_title_unique (is_unique)\n", output)


class MarkdownRendererTests(unittest.TestCase):
    def test_renders_tables_and_summary(self) -> None:
        expected = (
            "# Schema Changes\n\n"
            "## New Tables\n\n"
            "- `comments`\n\n"
            "## Removed Tables\n\n"
            "- `posts`\n\n"
            "## Modified Tables\n\n"
            "### `users`\n\n"
            "**Modified Columns:**\n"
            "- `name`:\n"
            "  - **length**: `255` → `100`\n\n"
            "## Summary\n\n"
            "- **Total Changes**: 3\n"
            "- **New Tables**: 1\n"
            "- **Removed Tables**: 1\n"
            "- **Modified Tables**: 1\n"
            "- **Breaking Changes**: Yes\n"
        )

        self.assertEqual(render_diff(_mixed_diff(), "markdown"), expected)

    def test_null_and_boolean_values_are_spelled_out(self) -> None:
        diff = Diff(
            modified_tables={
                "users": TableDiff(
                    modified_columns={
                        "name": {
                            "nullable_changed": FieldChange(from_=False, to=True),
                            "default_changed": FieldChange(from_=None, to="guest"),
                        }
                    }
                )
            }
        )

        output = render_diff(diff, "markdown")

        self.assertIn("  - **nullable**: `false` → `true`\n", output)
        self.assertIn("  - **default**: `null` → `guest`\n", output)

    def test_changelog_section_uses_timestamps_in_heading(self) -> None:
        output = render_changelog(
            Diff(new_tables=["comments"]), "2024-01-10 12:00:00", "2024-01-11 12:00:00", "markdown"
        )

        self.assertTrue(output.startswith("## Schema Changes (2024-01-10 12:00:00 → 2024-01-11 12:00:00)\n\n"))
        self.assertIn("### New Tables\n\n- `comments`\n", output)
        self.assertIn("### Summary\n\n- **Total Changes**: 1\n", output)

    def test_document_joins_sections_with_rules(self) -> None:
        sections = [
            ChangelogSection.build(Diff(new_tables=["comments"]), "a", "b"),
            ChangelogSection.build(Diff(removed_tables=["posts"]), "b", "c"),
        ]
        generated_at = datetime(2024, 1, 12, 9, 30, tzinfo=timezone.utc)

        output = render_changelog_document("Complete Schema Changelog", sections, "markdown", generated_at)

        self.assertTrue(output.startswith("# Complete Schema Changelog\n\nGenerated on: 2024-01-12 09:30:00\n\n"))
        self.assertEqual(output.count("\n---\n"), 2)
        self.assertLess(output.index("(a → b)"), output.index("(b → c)"))


class JsonRendererTests(unittest.TestCase):
    def test_diff_round_trips(self) -> None:
        diff = _mixed_diff()

        self.assertEqual(Diff.model_validate_json(render_diff(diff, "json")), diff)

    def test_field_changes_use_from_and_to_keys(self) -> None:
        payload = json.loads(render_diff(_mixed_diff(), "json"))

        change = payload["modified_tables"]["users"]["modified_columns"]["name"]["length_changed"]
        self.assertEqual(change, {"from": 255, "to": 100})

    def test_changelog_section_is_a_json_object(self) -> None:
        payload = json.loads(render_changelog(_mixed_diff(), "a", "b", "json"))

        self.assertEqual(payload["from"], "a")
        self.assertEqual(payload["to"], "b")
        self.assertEqual(payload["summary"]["total_changes"], 3)
        self.assertTrue(payload["summary"]["breaking_changes"])

    def test_document_lists_sections(self) -> None:
        sections = [ChangelogSection.build(Diff(new_tables=["comments"]), "a", "b")]

        payload = json.loads(render_changelog_document("Title", sections, "json"))

        self.assertEqual(payload["title"], "Title")
        self.assertIsNone(payload["generated_at"])
        self.assertEqual(len(payload["changelog"]), 1)


class RendererSelectionTests(unittest.TestCase):
    def test_format_lookup_is_case_insensitive(self) -> None:
        self.assertEqual(get_renderer("Markdown").format_name, "markdown")

    def test_unknown_format_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            get_renderer("html")


if __name__ == "__main__":
    unittest.main()
