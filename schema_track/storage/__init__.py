"""Snapshot stores."""

from schema_track.storage.snapshot_store import JsonFileSnapshotStore, SnapshotStore

__all__ = ["JsonFileSnapshotStore", "SnapshotStore"]
