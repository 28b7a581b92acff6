"""Command-line interface for snapshots, diffs and changelogs.

Usage:
    schema-track track [NAME] [--force]
    schema-track list [--format table|json] [--limit N]
    schema-track diff [--from REF] [--to REF] [--format text|markdown|json] [--breaking-only]
    schema-track compare --env ENV [--format text|markdown|json] [--breaking-only]
    schema-track changelog [--from REF] [--to REF] [--format ...] [--output PATH]
                           [--full] [--date-from DATE --date-to DATE]
    schema-track auto-snapshot

`REF` is a snapshot name or `latest`. Every command exits 0 on success and 1
on a handled failure.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
import json
import logging
import sys

from schema_track.config import Settings, get_settings
from schema_track.dependencies import build_schema_extractor, build_snapshot_store
from schema_track.errors import SchemaTrackError
from schema_track.extraction.extractor_interface import SchemaExtractor
from schema_track.schemas.diff import Diff
from schema_track.schemas.snapshot import Snapshot
from schema_track.services.breaking import breaking_warnings, is_breaking
from schema_track.services.rendering import RENDERERS, TIMESTAMP_FORMAT, render_diff
from schema_track.services.snapshots import (
    LATEST_REFERENCE,
    auto_snapshot_after_migration,
    compare_snapshots,
    compare_with_environment,
    diff_options_from_settings,
    generate_changelog,
    generate_changelog_for_date_range,
    generate_full_changelog,
    save_output,
    take_snapshot,
)
from schema_track.services.summary import summarize
from schema_track.storage.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

REPORT_FORMATS = tuple(RENDERERS)


class CommandContext:
    """Per-invocation wiring: settings, store, and a lazily built extractor."""

    def __init__(
        self,
        settings: Settings,
        store: SnapshotStore | None = None,
        extractor_factory: Callable[[Settings], SchemaExtractor] | None = None,
    ) -> None:
        self.settings = settings
        self.store = store or build_snapshot_store(settings)
        self._extractor_factory = extractor_factory or build_schema_extractor
        self._extractor: SchemaExtractor | None = None

    @property
    def extractor(self) -> SchemaExtractor:
        if self._extractor is None:
            self._extractor = self._extractor_factory(self.settings)
        return self._extractor


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per operation."""

    parser = argparse.ArgumentParser(
        prog="schema-track",
        description="Track database schema snapshots and generate changelogs.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    track = commands.add_parser("track", help="Take a snapshot of the current database schema.")
    track.add_argument("name", nargs="?", default=None, help="Name for the snapshot (optional).")
    track.add_argument("--force", action="store_true", help="Force overwrite if the snapshot exists.")

    list_parser = commands.add_parser("list", help="List all available schema snapshots.")
    list_parser.add_argument("--format", choices=("table", "json"), default="table")
    list_parser.add_argument("--limit", type=int, default=None, help="Show only the N most recent snapshots.")

    diff = commands.add_parser("diff", help="Compare two schema snapshots and show differences.")
    diff.add_argument("--from", dest="from_ref", default=LATEST_REFERENCE, help='Snapshot name or "latest".')
    diff.add_argument("--to", dest="to_ref", default=LATEST_REFERENCE, help='Snapshot name or "latest".')
    diff.add_argument("--format", choices=REPORT_FORMATS, default="text")
    diff.add_argument("--breaking-only", action="store_true", help="Show only breaking changes.")

    compare = commands.add_parser("compare", help="Compare the current schema with another environment.")
    compare.add_argument("--env", dest="environment", default=None, help="Environment name, e.g. staging.")
    compare.add_argument("--format", choices=REPORT_FORMATS, default="text")
    compare.add_argument("--breaking-only", action="store_true", help="Show only breaking changes.")

    changelog = commands.add_parser("changelog", help="Generate a changelog from schema snapshots.")
    changelog.add_argument("--from", dest="from_ref", default=LATEST_REFERENCE, help='Snapshot name or "latest".')
    changelog.add_argument("--to", dest="to_ref", default=LATEST_REFERENCE, help='Snapshot name or "latest".')
    changelog.add_argument("--format", choices=REPORT_FORMATS, default="markdown")
    changelog.add_argument("--output", default=None, help="Write the changelog to this file.")
    changelog.add_argument("--full", action="store_true", help="Generate the changelog for all snapshots.")
    changelog.add_argument("--date-from", default=None, help="Start date (YYYY-MM-DD).")
    changelog.add_argument("--date-to", default=None, help="End date (YYYY-MM-DD); a bare date includes the whole day.")

    commands.add_parser("auto-snapshot", help="Snapshot after a migration batch when auto_snapshot is enabled.")

    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    settings: Settings | None = None,
    store: SnapshotStore | None = None,
    extractor_factory: Callable[[Settings], SchemaExtractor] | None = None,
) -> int:
    """Run one command and return its exit code."""

    args = build_parser().parse_args(argv)
    active_settings = settings or get_settings()
    logging.basicConfig(
        level=active_settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    context = CommandContext(active_settings, store=store, extractor_factory=extractor_factory)
    handler = COMMANDS[args.command]
    try:
        return handler(context, args)
    except SchemaTrackError as exc:
        _error(str(exc))
        return 1
    except ValueError as exc:
        _error(str(exc))
        return 1
    except Exception as exc:
        logger.exception("schema_track.command_failed command=%s", args.command)
        _error(f"Command '{args.command}' failed: {exc}")
        return 1


def run_track(context: CommandContext, args: argparse.Namespace) -> int:
    print("Taking schema snapshot...")
    snapshot = take_snapshot(
        context.store,
        context.extractor,
        name=args.name,
        force=args.force,
        prefix=context.settings.snapshot_prefix,
    )
    print("Snapshot created successfully!")
    print(f"Name: {snapshot.name}")
    print(f"Timestamp: {snapshot.timestamp.isoformat()}")
    print(f"Database: {snapshot.database}")
    print(f"Tables: {snapshot.table_count}")
    return 0


def run_list(context: CommandContext, args: argparse.Namespace) -> int:
    snapshots = context.store.list()
    if not snapshots:
        print("No snapshots found.")
        return 0

    if args.limit is not None and args.limit > 0:
        snapshots = snapshots[-args.limit :]

    if args.format == "json":
        payload = [snapshot.model_dump(mode="json", by_alias=True) for snapshot in snapshots]
        print(json.dumps(payload, indent=4, ensure_ascii=False))
    else:
        print(_snapshot_table(snapshots))
    return 0


def run_diff(context: CommandContext, args: argparse.Namespace) -> int:
    diff = compare_snapshots(
        context.store,
        args.from_ref,
        args.to_ref,
        diff_options_from_settings(context.settings),
    )
    return _report_diff(context, diff, args.format, breaking_only=args.breaking_only)


def run_compare(context: CommandContext, args: argparse.Namespace) -> int:
    if not args.environment:
        _error("Please specify an environment with --env option.")
        return 1

    print(f"Comparing with {args.environment} environment...")
    diff = compare_with_environment(
        args.environment,
        settings=context.settings,
        current_extractor=context.extractor,
        options=diff_options_from_settings(context.settings),
    )
    return _report_diff(context, diff, args.format, breaking_only=args.breaking_only)


def run_changelog(context: CommandContext, args: argparse.Namespace) -> int:
    options = diff_options_from_settings(context.settings)
    if args.full:
        content = generate_full_changelog(context.store, args.format, options)
    elif args.date_from and args.date_to:
        content = generate_changelog_for_date_range(
            context.store, args.date_from, args.date_to, args.format, options
        )
    else:
        content = generate_changelog(context.store, args.from_ref, args.to_ref, args.format, options)

    if args.output:
        path = save_output(content, args.output)
        print(f"Changelog saved to: {path}")
    else:
        print(content)
    return 0


def run_auto_snapshot(context: CommandContext, args: argparse.Namespace) -> int:
    _ = args
    snapshot = auto_snapshot_after_migration(context.store, context.extractor, context.settings)
    if snapshot is None:
        print("Auto snapshot is disabled.")
    else:
        print(f"Snapshot created: {snapshot.name}")
    return 0


COMMANDS: dict[str, Callable[[CommandContext, argparse.Namespace], int]] = {
    "track": run_track,
    "list": run_list,
    "diff": run_diff,
    "compare": run_compare,
    "changelog": run_changelog,
    "auto-snapshot": run_auto_snapshot,
}


def _report_diff(context: CommandContext, diff: Diff, fmt: str, *, breaking_only: bool) -> int:
    if breaking_only and not is_breaking(diff):
        print("No breaking changes detected.")
        return 0

    print(render_diff(diff, fmt))
    summary = summarize(diff)
    print()
    print(f"Summary: {summary.total_changes} total changes")

    breaking_settings = context.settings.breaking_changes
    if breaking_settings.enabled:
        if summary.breaking_changes:
            print("Breaking changes detected!")
        for warning in breaking_warnings(diff, breaking_settings.warn_on):
            print(f"Warning: {warning}")
    return 0


def _snapshot_table(snapshots: Sequence[Snapshot]) -> str:
    headers = ("Name", "Timestamp", "Database", "Tables")
    rows = [
        (
            snapshot.name,
            snapshot.timestamp.strftime(TIMESTAMP_FORMAT),
            snapshot.database,
            str(snapshot.table_count),
        )
        for snapshot in snapshots
    ]
    widths = [max(len(row[idx]) for row in (headers, *rows)) for idx in range(len(headers))]
    separator = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    def format_row(row: Sequence[str]) -> str:
        return "|" + "|".join(f" {cell.ljust(width)} " for cell, width in zip(row, widths)) + "|"

    lines = [separator, format_row(headers), separator, *(format_row(row) for row in rows), separator]
    return "\n".join(lines)


def _error(message: str) -> None:
    print(message, file=sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
