"""Read-only snapshot, diff and changelog routes."""

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from schema_track.config import Settings, get_settings
from schema_track.dependencies import get_snapshot_store
from schema_track.errors import NotFoundError, ResolutionError
from schema_track.schemas.api import ApiResponse, ChangelogRead, DiffReport, ReportFormat, SnapshotListItem
from schema_track.schemas.snapshot import Snapshot
from schema_track.services.diff import compute_diff
from schema_track.services.snapshots import (
    LATEST_REFERENCE,
    diff_options_from_settings,
    generate_changelog,
    generate_changelog_for_date_range,
    generate_full_changelog,
    load_snapshot_pair,
)
from schema_track.services.summary import summarize
from schema_track.storage.snapshot_store import SnapshotStore

router = APIRouter()


@router.get("/snapshots", response_model=ApiResponse[list[SnapshotListItem]])
def list_snapshots(
    limit: int | None = Query(default=None, ge=1, le=1000),
    store: SnapshotStore = Depends(get_snapshot_store),
) -> ApiResponse[list[SnapshotListItem]]:
    """List stored snapshots oldest first; `limit` keeps the most recent ones."""

    snapshots = store.list()
    if limit is not None:
        snapshots = snapshots[-limit:]
    return ApiResponse(data=[SnapshotListItem.from_snapshot(snapshot) for snapshot in snapshots])


@router.get("/snapshots/{name}", response_model=ApiResponse[Snapshot])
def get_snapshot(
    name: str = Path(..., min_length=1),
    store: SnapshotStore = Depends(get_snapshot_store),
) -> ApiResponse[Snapshot]:
    """Return one snapshot including its full table structure."""

    try:
        snapshot = store.get(name)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Snapshot not found")
    return ApiResponse(data=snapshot)


@router.get("/diff", response_model=ApiResponse[DiffReport])
def get_diff(
    from_ref: str = Query(default=LATEST_REFERENCE, alias="from", min_length=1),
    to_ref: str = Query(default=LATEST_REFERENCE, alias="to", min_length=1),
    store: SnapshotStore = Depends(get_snapshot_store),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[DiffReport]:
    """Diff two snapshots referenced by name or `latest`."""

    try:
        from_snapshot, to_snapshot = load_snapshot_pair(store, from_ref, to_ref)
    except (ResolutionError, NotFoundError) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    diff = compute_diff(from_snapshot, to_snapshot, diff_options_from_settings(settings))
    return ApiResponse(
        data=DiffReport(
            from_snapshot=from_snapshot.name,
            to_snapshot=to_snapshot.name,
            diff=diff,
            summary=summarize(diff),
        )
    )


@router.get("/changelog", response_model=ApiResponse[ChangelogRead])
def get_changelog(
    from_ref: str = Query(default=LATEST_REFERENCE, alias="from", min_length=1),
    to_ref: str = Query(default=LATEST_REFERENCE, alias="to", min_length=1),
    format: ReportFormat = Query(default="markdown"),
    full: bool = Query(default=False),
    date_from: str | None = Query(default=None),
    date_to: str | None = Query(default=None),
    store: SnapshotStore = Depends(get_snapshot_store),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[ChangelogRead]:
    """Render a changelog for a snapshot pair, a date range, or the full history."""

    options = diff_options_from_settings(settings)
    try:
        if full:
            content = generate_full_changelog(store, format, options)
        elif date_from and date_to:
            content = generate_changelog_for_date_range(store, date_from, date_to, format, options)
        else:
            content = generate_changelog(store, from_ref, to_ref, format, options)
    except (ResolutionError, NotFoundError) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ApiResponse(data=ChangelogRead(format=format, content=content))
