"""Snapshot persistence: one pretty-printed JSON document per snapshot name."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from pathlib import Path

from pydantic import ValidationError

from schema_track.errors import SnapshotExistsError, SnapshotReadError, WriteError
from schema_track.schemas.snapshot import Snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".json"


class SnapshotStore(ABC):
    """Abstract key/value store of snapshots keyed by name."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return whether a snapshot named ``name`` is stored."""

    @abstractmethod
    def get(self, name: str) -> Snapshot | None:
        """Return the snapshot named ``name`` or ``None``."""

    @abstractmethod
    def list(self) -> list[Snapshot]:
        """Return every stored snapshot ordered by ascending timestamp."""

    @abstractmethod
    def save(self, snapshot: Snapshot, *, overwrite: bool = False) -> None:
        """Persist ``snapshot``; refuse to replace an existing name unless ``overwrite``."""

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Delete a snapshot, returning whether anything was removed."""

    def latest(self) -> Snapshot | None:
        snapshots = self.list()
        return snapshots[-1] if snapshots else None


class JsonFileSnapshotStore(SnapshotStore):
    """Store snapshots as ``<name>.json`` files under a root directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def exists(self, name: str) -> bool:
        return self._path_for(name).is_file()

    def get(self, name: str) -> Snapshot | None:
        path = self._path_for(name)
        if not path.is_file():
            return None
        try:
            return Snapshot.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as exc:
            raise SnapshotReadError(f"Snapshot '{name}' at {path} is unreadable: {exc}") from exc

    def list(self) -> list[Snapshot]:
        if not self.root.is_dir():
            return []
        snapshots: list[Snapshot] = []
        for path in sorted(self.root.glob(f"*{SNAPSHOT_SUFFIX}")):
            try:
                snapshots.append(Snapshot.model_validate_json(path.read_bytes()))
            except (OSError, ValidationError):
                logger.warning("schema_track.snapshot_unreadable path=%s", path)
        snapshots.sort(key=lambda snapshot: (snapshot.timestamp, snapshot.name))
        return snapshots

    def save(self, snapshot: Snapshot, *, overwrite: bool = False) -> None:
        path = self._path_for(snapshot.name)
        payload = snapshot.model_dump_json(by_alias=True, indent=4)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with path.open("w" if overwrite else "x", encoding="utf-8") as handle:
                handle.write(payload)
        except FileExistsError as exc:
            raise SnapshotExistsError(
                f"Snapshot '{snapshot.name}' already exists. Use --force to overwrite."
            ) from exc
        except OSError as exc:
            raise WriteError(f"Failed to write snapshot '{snapshot.name}' to {path}: {exc}") from exc
        logger.info("schema_track.snapshot_saved name=%s path=%s overwrite=%s", snapshot.name, path, overwrite)

    def delete(self, name: str) -> bool:
        path = self._path_for(name)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as exc:
            raise WriteError(f"Failed to delete snapshot '{name}': {exc}") from exc
        logger.info("schema_track.snapshot_deleted name=%s", name)
        return True

    def _path_for(self, name: str) -> Path:
        if not name or name in {".", ".."} or "/" in name or "\\" in name:
            raise ValueError(f"Invalid snapshot name: {name!r}")
        return self.root / f"{name}{SNAPSHOT_SUFFIX}"
