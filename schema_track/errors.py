"""Error taxonomy shared by the store, extractor and orchestration layers."""


class SchemaTrackError(RuntimeError):
    """Base class for handled schema-track failures."""


class NotFoundError(SchemaTrackError):
    """A snapshot name does not exist in the store."""


class ResolutionError(SchemaTrackError):
    """A snapshot reference or environment name could not be resolved."""


class WriteError(SchemaTrackError):
    """Persisting a snapshot or rendered output failed."""


class SnapshotExistsError(WriteError):
    """A snapshot with the same name exists and overwriting was not forced."""


class ExtractionError(SchemaTrackError):
    """Schema introspection against a live database failed."""


class SnapshotReadError(SchemaTrackError):
    """A stored snapshot file exists but cannot be read or parsed."""
