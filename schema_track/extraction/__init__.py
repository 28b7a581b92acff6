"""Schema extractors."""

from schema_track.extraction.extractor_interface import SchemaExtractor
from schema_track.extraction.sqlalchemy_extractor import SQLAlchemySchemaExtractor

__all__ = ["SchemaExtractor", "SQLAlchemySchemaExtractor"]
