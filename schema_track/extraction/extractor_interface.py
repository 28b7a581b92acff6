"""Extractor interface for pluggable schema introspection."""

from abc import ABC, abstractmethod

from schema_track.schemas.snapshot import SchemaTables


class SchemaExtractor(ABC):
    """Abstract schema extractor."""

    @property
    @abstractmethod
    def database_label(self) -> str:
        """Driver or connection label recorded on snapshots."""

    @abstractmethod
    def extract(self) -> SchemaTables:
        """Read live database metadata into the snapshot table mapping."""
