"""Integration tests for the SQLAlchemy schema extractor against in-memory SQLite."""

from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, String, Table, Text, create_engine
from sqlalchemy.pool import StaticPool

from schema_track.errors import ExtractionError
from schema_track.extraction.sqlalchemy_extractor import SQLAlchemySchemaExtractor


def _build_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata = MetaData()
    Table(
        "users",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("name", String(255), nullable=False),
        Column("email", String(100), nullable=False, unique=True),
        Column("status", String(20), server_default="draft"),
    )
    posts = Table(
        "posts",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
        Column("title", String(200), nullable=False),
        Column("body", Text),
    )
    Index("posts_title_index", posts.c.title)
    Table("alembic_version", metadata, Column("version_num", String(32), primary_key=True))
    metadata.create_all(engine)
    return engine


class SQLAlchemySchemaExtractorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = _build_engine()
        self.extractor = SQLAlchemySchemaExtractor(
            self.engine,
            exclude_tables=["alembic_version"],
        )

    def tearDown(self) -> None:
        self.engine.dispose()

    def test_lists_tables_except_excluded(self) -> None:
        tables = self.extractor.extract()

        self.assertEqual(set(tables), {"users", "posts"})

    def test_columns_capture_type_length_and_nullability(self) -> None:
        columns = self.extractor.extract()["users"].columns

        self.assertEqual(list(columns), ["id", "name", "email", "status"])
        self.assertEqual(columns["id"].type, "integer")
        self.assertEqual(columns["name"].type, "varchar")
        self.assertEqual(columns["name"].length, 255)
        self.assertFalse(columns["name"].nullable)
        self.assertTrue(columns["status"].nullable)
        self.assertIsNone(columns["name"].default)
        self.assertEqual(columns["status"].default, "'draft'")

    def test_text_columns_have_no_length(self) -> None:
        body = self.extractor.extract()["posts"].columns["body"]

        self.assertEqual(body.type, "text")
        self.assertIsNone(body.length)

    def test_indexes_include_primary_named_and_unique(self) -> None:
        users = self.extractor.extract()["users"]
        posts = self.extractor.extract()["posts"]

        self.assertTrue(users.indexes["primary"].is_primary)
        self.assertEqual(users.indexes["primary"].columns, ["id"])
        self.assertEqual(posts.indexes["posts_title_index"].columns, ["title"])
        self.assertFalse(posts.indexes["posts_title_index"].is_unique)
        unique_indexes = [index for index in users.indexes.values() if index.is_unique and not index.is_primary]
        self.assertEqual([index.columns for index in unique_indexes], [["email"]])

    def test_foreign_keys_are_captured(self) -> None:
        foreign_keys = self.extractor.extract()["posts"].foreign_keys

        self.assertEqual(len(foreign_keys), 1)
        foreign_key = next(iter(foreign_keys.values()))
        self.assertEqual(foreign_key.local_columns, ["user_id"])
        self.assertEqual(foreign_key.foreign_table, "users")
        self.assertEqual(foreign_key.foreign_columns, ["id"])

    def test_database_label_defaults_to_dialect(self) -> None:
        self.assertEqual(self.extractor.database_label, "sqlite")
        labelled = SQLAlchemySchemaExtractor(self.engine, database_label="staging")
        self.assertEqual(labelled.database_label, "staging")

    def test_unsupported_dialect_logs_a_warning(self) -> None:
        with self.assertLogs("schema_track.extraction.sqlalchemy_extractor", level="WARNING"):
            SQLAlchemySchemaExtractor(self.engine, supported_databases=["mysql"])


class ExtractorFailureTests(unittest.TestCase):
    def test_unparseable_url_raises_extraction_error(self) -> None:
        with self.assertRaises(ExtractionError):
            SQLAlchemySchemaExtractor.from_url("not a database url")

    def test_unreachable_database_raises_extraction_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing" / "db.sqlite"
            extractor = SQLAlchemySchemaExtractor.from_url(f"sqlite+pysqlite:///{missing}")

            with self.assertLogs("schema_track.extraction.sqlalchemy_extractor", level="ERROR"):
                with self.assertRaises(ExtractionError):
                    extractor.extract()
            extractor.engine.dispose()


if __name__ == "__main__":
    unittest.main()
