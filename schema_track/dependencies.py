"""Dependency providers shared by the HTTP routes and the CLI."""

from fastapi import Depends

from schema_track.config import Settings, get_settings
from schema_track.extraction.sqlalchemy_extractor import SQLAlchemySchemaExtractor
from schema_track.storage.snapshot_store import JsonFileSnapshotStore, SnapshotStore


def build_snapshot_store(settings: Settings) -> SnapshotStore:
    """Return the file store rooted at the configured storage path."""

    return JsonFileSnapshotStore(settings.storage_path)


def build_schema_extractor(settings: Settings) -> SQLAlchemySchemaExtractor:
    """Return an extractor for the configured database connection."""

    return SQLAlchemySchemaExtractor.from_url(
        settings.database_url,
        exclude_tables=settings.exclude_tables,
        database_label=settings.database_label,
        supported_databases=settings.supported_databases,
    )


def get_snapshot_store(settings: Settings = Depends(get_settings)) -> SnapshotStore:
    """FastAPI dependency yielding the configured snapshot store."""

    return build_snapshot_store(settings)
