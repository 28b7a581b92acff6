"""Snapshot orchestration: capture, reference resolution, comparison and changelogs."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date, datetime, time, timezone
import logging
from pathlib import Path
from time import perf_counter

from schema_track.config import Settings
from schema_track.errors import NotFoundError, ResolutionError, SnapshotExistsError, WriteError
from schema_track.extraction.extractor_interface import SchemaExtractor
from schema_track.extraction.sqlalchemy_extractor import SQLAlchemySchemaExtractor
from schema_track.schemas.diff import Diff
from schema_track.schemas.snapshot import Snapshot
from schema_track.services.diff import DiffOptions, compute_diff, compute_schema_diff
from schema_track.services.rendering import (
    TIMESTAMP_FORMAT,
    ChangelogSection,
    render_changelog,
    render_changelog_document,
)
from schema_track.storage.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

LATEST_REFERENCE = "latest"
AUTO_SNAPSHOT_PREFIX = "auto_migration"
UNKNOWN_TIMESTAMP = "Unknown"
FULL_CHANGELOG_TITLE = "Complete Schema Changelog"
NO_SNAPSHOTS_MESSAGE = "No snapshots available for changelog generation.\n"
NO_SNAPSHOTS_IN_RANGE_MESSAGE = "No snapshots found in the specified date range.\n"

ExtractorFactory = Callable[[str], SchemaExtractor]


def diff_options_from_settings(settings: Settings) -> DiffOptions:
    """Translate configuration switches into diff engine options."""

    return DiffOptions(compare_indexes=settings.diff_indexes)


def default_snapshot_name(prefix: str, now: datetime) -> str:
    return f"{prefix}_{now.strftime('%Y_%m_%d_%H%M%S')}"


def take_snapshot(
    store: SnapshotStore,
    extractor: SchemaExtractor,
    *,
    name: str | None = None,
    force: bool = False,
    prefix: str = "schema_snapshot",
    now: datetime | None = None,
) -> Snapshot:
    """Extract the live schema and persist it as a named snapshot."""

    timestamp = now or datetime.now(timezone.utc)
    snapshot_name = name or default_snapshot_name(prefix, timestamp)
    if not force and store.exists(snapshot_name):
        raise SnapshotExistsError(f"Snapshot '{snapshot_name}' already exists. Use --force to overwrite.")

    total_started = perf_counter()
    started = perf_counter()
    tables = extractor.extract()
    extract_ms = (perf_counter() - started) * 1000.0

    snapshot = Snapshot(
        name=snapshot_name,
        timestamp=timestamp,
        database=extractor.database_label,
        tables=tables,
    )
    started = perf_counter()
    store.save(snapshot, overwrite=force)
    save_ms = (perf_counter() - started) * 1000.0

    logger.info(
        "schema_track.snapshot_timing name=%s database=%s tables=%d extract_ms=%.2f save_ms=%.2f total_ms=%.2f",
        snapshot.name,
        snapshot.database,
        snapshot.table_count,
        extract_ms,
        save_ms,
        (perf_counter() - total_started) * 1000.0,
    )
    return snapshot


def auto_snapshot_after_migration(
    store: SnapshotStore,
    extractor: SchemaExtractor,
    settings: Settings,
    *,
    now: datetime | None = None,
) -> Snapshot | None:
    """Take an ``auto_migration_*`` snapshot; call this once a migration batch has run."""

    if not settings.auto_snapshot:
        logger.info("schema_track.auto_snapshot_skipped reason=disabled")
        return None
    return take_snapshot(store, extractor, prefix=AUTO_SNAPSHOT_PREFIX, now=now)


def resolve_snapshot_reference(store: SnapshotStore, ref: str) -> str | None:
    """Map ``latest`` or an explicit snapshot name to a stored snapshot name."""

    if ref == LATEST_REFERENCE:
        latest = store.latest()
        return latest.name if latest else None
    try:
        return ref if store.exists(ref) else None
    except ValueError:
        return None


def load_snapshot_pair(store: SnapshotStore, from_ref: str, to_ref: str) -> tuple[Snapshot, Snapshot]:
    """Resolve both references and fetch the full snapshots."""

    from_name = resolve_snapshot_reference(store, from_ref)
    to_name = resolve_snapshot_reference(store, to_ref)
    unresolved = [ref for ref, name in ((from_ref, from_name), (to_ref, to_name)) if name is None]
    if unresolved:
        raise ResolutionError(
            f"Could not resolve snapshot names: {', '.join(unresolved)}. Use --from and --to options."
        )
    return _fetch_snapshot(store, from_name), _fetch_snapshot(store, to_name)


def compare_snapshots(
    store: SnapshotStore,
    from_ref: str,
    to_ref: str,
    options: DiffOptions | None = None,
) -> Diff:
    """Diff two stored snapshots referenced by name or ``latest``."""

    from_snapshot, to_snapshot = load_snapshot_pair(store, from_ref, to_ref)
    return compute_diff(from_snapshot, to_snapshot, options)


def compare_with_environment(
    environment: str,
    *,
    settings: Settings,
    current_extractor: SchemaExtractor,
    extractor_factory: ExtractorFactory | None = None,
    options: DiffOptions | None = None,
) -> Diff:
    """Diff the environment's live schema (from) against the current database (to)."""

    environment_settings = settings.environments.get(environment)
    if environment_settings is None:
        raise ResolutionError(f"Environment '{environment}' is not configured.")
    if not environment_settings.enabled:
        raise ResolutionError(f"Environment '{environment}' is not enabled.")
    if not environment_settings.database_url:
        raise ResolutionError(f"Environment '{environment}' has no database_url configured.")

    factory = extractor_factory or _environment_extractor_factory(environment, settings)
    started = perf_counter()
    target_tables = factory(environment_settings.database_url).extract()
    current_tables = current_extractor.extract()
    diff = compute_schema_diff(target_tables, current_tables, options)
    logger.info(
        "schema_track.environment_compare environment=%s new_tables=%d removed_tables=%d "
        "modified_tables=%d total_ms=%.2f",
        environment,
        len(diff.new_tables),
        len(diff.removed_tables),
        len(diff.modified_tables),
        (perf_counter() - started) * 1000.0,
    )
    return diff


def generate_changelog(
    store: SnapshotStore,
    from_ref: str,
    to_ref: str,
    fmt: str = "markdown",
    options: DiffOptions | None = None,
) -> str:
    """Render the changelog between two referenced snapshots."""

    from_snapshot, to_snapshot = load_snapshot_pair(store, from_ref, to_ref)
    diff = compute_diff(from_snapshot, to_snapshot, options)
    return render_changelog(diff, timestamp_label(from_snapshot), timestamp_label(to_snapshot), fmt)


def generate_full_changelog(
    store: SnapshotStore,
    fmt: str = "markdown",
    options: DiffOptions | None = None,
    *,
    now: datetime | None = None,
) -> str:
    """Walk every stored snapshot pairwise in timestamp order."""

    started = perf_counter()
    snapshots = store.list()
    if len(snapshots) < 2:
        return NO_SNAPSHOTS_MESSAGE

    content = render_changelog_document(
        FULL_CHANGELOG_TITLE,
        _pairwise_sections(snapshots, options),
        fmt,
        generated_at=now or datetime.now(timezone.utc),
    )
    logger.info(
        "schema_track.changelog_timing mode=full snapshots=%d format=%s total_ms=%.2f",
        len(snapshots),
        fmt,
        (perf_counter() - started) * 1000.0,
    )
    return content


def generate_changelog_for_date_range(
    store: SnapshotStore,
    date_from: str,
    date_to: str,
    fmt: str = "markdown",
    options: DiffOptions | None = None,
) -> str:
    """Walk the snapshots whose timestamp lies in ``[date_from, date_to]`` pairwise."""

    started = perf_counter()
    lower = parse_date_bound(date_from)
    upper = parse_date_bound(date_to, end_of_day=True)
    snapshots = [snapshot for snapshot in store.list() if lower <= snapshot.timestamp <= upper]
    if len(snapshots) < 2:
        return NO_SNAPSHOTS_IN_RANGE_MESSAGE

    content = render_changelog_document(
        f"Schema Changelog ({date_from} to {date_to})",
        _pairwise_sections(snapshots, options),
        fmt,
    )
    logger.info(
        "schema_track.changelog_timing mode=range snapshots=%d format=%s total_ms=%.2f",
        len(snapshots),
        fmt,
        (perf_counter() - started) * 1000.0,
    )
    return content


def save_output(content: str, path: Path | str) -> Path:
    """Write rendered output to ``path``."""

    output_path = Path(path)
    try:
        output_path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Failed to save output to {output_path}: {exc}") from exc
    logger.info("schema_track.output_saved path=%s bytes=%d", output_path, len(content.encode("utf-8")))
    return output_path


def parse_date_bound(value: str, *, end_of_day: bool = False) -> datetime:
    """Parse an ISO date or date-time; bare dates span the whole day when ``end_of_day``."""

    raw = value.strip()
    try:
        parsed_date = date.fromisoformat(raw)
    except ValueError:
        parsed_date = None

    if parsed_date is not None:
        parsed = datetime.combine(parsed_date, time.max if end_of_day else time.min)
    else:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValueError(f"Invalid date: {value!r}. Use ISO format, e.g. 2024-01-31.") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def timestamp_label(snapshot: Snapshot | None) -> str:
    if snapshot is None:
        return UNKNOWN_TIMESTAMP
    return snapshot.timestamp.strftime(TIMESTAMP_FORMAT)


def _pairwise_sections(snapshots: Sequence[Snapshot], options: DiffOptions | None) -> list[ChangelogSection]:
    sections: list[ChangelogSection] = []
    for index in range(1, len(snapshots)):
        previous, current = snapshots[index - 1], snapshots[index]
        sections.append(
            ChangelogSection.build(
                compute_diff(previous, current, options),
                timestamp_label(previous),
                timestamp_label(current),
            )
        )
    return sections


def _fetch_snapshot(store: SnapshotStore, name: str) -> Snapshot:
    snapshot = store.get(name)
    if snapshot is None:
        raise NotFoundError(f"Snapshot '{name}' not found.")
    return snapshot


def _environment_extractor_factory(environment: str, settings: Settings) -> ExtractorFactory:
    def build(database_url: str) -> SchemaExtractor:
        return SQLAlchemySchemaExtractor.from_url(
            database_url,
            exclude_tables=settings.exclude_tables,
            database_label=environment,
            supported_databases=settings.supported_databases,
        )

    return build
