"""Schema extractor backed by the SQLAlchemy runtime inspection API."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from time import perf_counter
from typing import Any

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine, Inspector
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.types import CHAR, NCHAR, TypeEngine

from schema_track.errors import ExtractionError
from schema_track.extraction.extractor_interface import SchemaExtractor
from schema_track.schemas.snapshot import (
    ColumnDefinition,
    ForeignKeyDefinition,
    IndexDefinition,
    SchemaTables,
    TableDefinition,
)

logger = logging.getLogger(__name__)

PRIMARY_INDEX_NAME = "primary"
DEFAULT_REFERENTIAL_ACTION = "NO ACTION"


class SQLAlchemySchemaExtractor(SchemaExtractor):
    """Extract tables, columns, indexes and foreign keys through ``sqlalchemy.inspect``."""

    def __init__(
        self,
        engine: Engine,
        *,
        exclude_tables: Iterable[str] = (),
        database_label: str | None = None,
        supported_databases: Iterable[str] | None = None,
    ) -> None:
        self.engine = engine
        self.exclude_tables = frozenset(exclude_tables)
        self._database_label = database_label or engine.dialect.name
        if supported_databases is not None and engine.dialect.name not in set(supported_databases):
            logger.warning(
                "schema_track.extractor_unsupported_dialect dialect=%s supported=%s",
                engine.dialect.name,
                ",".join(supported_databases),
            )

    @classmethod
    def from_url(
        cls,
        database_url: str,
        *,
        exclude_tables: Iterable[str] = (),
        database_label: str | None = None,
        supported_databases: Iterable[str] | None = None,
    ) -> SQLAlchemySchemaExtractor:
        """Build an extractor with its own engine for ``database_url``."""

        try:
            engine = create_engine(database_url, future=True)
        except SQLAlchemyError as exc:
            raise ExtractionError(f"Could not create engine for database URL: {exc}") from exc
        return cls(
            engine,
            exclude_tables=exclude_tables,
            database_label=database_label,
            supported_databases=supported_databases,
        )

    @property
    def database_label(self) -> str:
        return self._database_label

    def extract(self) -> SchemaTables:
        started = perf_counter()
        try:
            inspector = inspect(self.engine)
            tables: SchemaTables = {}
            for table_name in inspector.get_table_names():
                if table_name in self.exclude_tables:
                    continue
                tables[table_name] = TableDefinition(
                    columns=_extract_columns(inspector, table_name),
                    indexes=_extract_indexes(inspector, table_name),
                    foreign_keys=_extract_foreign_keys(inspector, table_name),
                )
        except SQLAlchemyError as exc:
            logger.exception(
                "schema_track.extract_failed dialect=%s elapsed_ms=%.2f",
                self.engine.dialect.name,
                (perf_counter() - started) * 1000.0,
            )
            raise ExtractionError(f"Schema introspection failed: {exc}") from exc

        logger.info(
            "schema_track.extract_timing dialect=%s tables=%d total_ms=%.2f",
            self.engine.dialect.name,
            len(tables),
            (perf_counter() - started) * 1000.0,
        )
        return tables


def _extract_columns(inspector: Inspector, table_name: str) -> dict[str, ColumnDefinition]:
    columns: dict[str, ColumnDefinition] = {}
    for column in inspector.get_columns(table_name):
        column_type: TypeEngine[Any] = column["type"]
        columns[column["name"]] = ColumnDefinition(
            type=_type_name(column_type),
            length=_int_attribute(column_type, "length"),
            precision=_int_attribute(column_type, "precision"),
            scale=_int_attribute(column_type, "scale"),
            nullable=bool(column.get("nullable", True)),
            default=column.get("default"),
            auto_increment=column.get("autoincrement") is True or column.get("identity") is not None,
            unsigned=bool(getattr(column_type, "unsigned", False)),
            fixed=isinstance(column_type, (CHAR, NCHAR)),
        )
    return columns


def _extract_indexes(inspector: Inspector, table_name: str) -> dict[str, IndexDefinition]:
    indexes: dict[str, IndexDefinition] = {}

    primary_key = inspector.get_pk_constraint(table_name)
    pk_columns = list(primary_key.get("constrained_columns") or [])
    if pk_columns:
        indexes[primary_key.get("name") or PRIMARY_INDEX_NAME] = IndexDefinition(
            columns=pk_columns,
            is_unique=True,
            is_primary=True,
        )

    for index in inspector.get_indexes(table_name):
        name = index.get("name")
        if not name:
            continue
        indexes[name] = IndexDefinition(
            columns=[column for column in index.get("column_names", []) if column is not None],
            is_unique=bool(index.get("unique", False)),
        )

    try:
        unique_constraints = inspector.get_unique_constraints(table_name)
    except NotImplementedError:
        unique_constraints = []
    for constraint in unique_constraints:
        column_names = list(constraint.get("column_names") or [])
        name = constraint.get("name") or _constraint_name(table_name, column_names, "unique")
        if name in indexes:
            continue
        indexes[name] = IndexDefinition(columns=column_names, is_unique=True)

    return indexes


def _extract_foreign_keys(inspector: Inspector, table_name: str) -> dict[str, ForeignKeyDefinition]:
    foreign_keys: dict[str, ForeignKeyDefinition] = {}
    for foreign_key in inspector.get_foreign_keys(table_name):
        local_columns = list(foreign_key.get("constrained_columns") or [])
        options = foreign_key.get("options") or {}
        name = foreign_key.get("name") or _constraint_name(table_name, local_columns, "foreign")
        foreign_keys[name] = ForeignKeyDefinition(
            local_columns=local_columns,
            foreign_table=foreign_key["referred_table"],
            foreign_columns=list(foreign_key.get("referred_columns") or []),
            on_delete=(options.get("ondelete") or DEFAULT_REFERENTIAL_ACTION).upper(),
            on_update=(options.get("onupdate") or DEFAULT_REFERENTIAL_ACTION).upper(),
        )
    return foreign_keys


def _type_name(column_type: TypeEngine[Any]) -> str:
    visit_name = getattr(column_type, "__visit_name__", None)
    return str(visit_name or type(column_type).__name__).lower()


def _int_attribute(column_type: TypeEngine[Any], attribute: str) -> int | None:
    value = getattr(column_type, attribute, None)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _constraint_name(table_name: str, columns: list[str], suffix: str) -> str:
    """Deterministic name for constraints the dialect reports anonymously."""

    return "_".join([table_name, *columns, suffix])
