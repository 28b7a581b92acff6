"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

DEFAULT_EXCLUDE_TABLES: tuple[str, ...] = (
    "alembic_version",
    "migrations",
    "failed_jobs",
    "password_reset_tokens",
    "personal_access_tokens",
    "sessions",
    "cache",
    "cache_locks",
)
BREAKING_CHANGE_CATEGORIES: tuple[str, ...] = (
    "column_removal",
    "table_removal",
    "type_changes",
    "nullable_to_not_null",
    "unique_constraint_removal",
)


class EnvironmentSettings(BaseModel):
    """Connection descriptor for a comparable environment."""

    database_url: str | None = None
    enabled: bool = False


class BreakingChangeSettings(BaseModel):
    """Breaking-change reporting options. `warn_on` only drives advisory warnings."""

    enabled: bool = True
    warn_on: list[str] = Field(default_factory=lambda: list(BREAKING_CHANGE_CATEGORIES))


class NotificationSettings(BaseModel):
    """Notification channels. Declared for configuration parity; nothing sends yet."""

    enabled: bool = False
    channels: dict[str, str | None] = Field(
        default_factory=lambda: {"slack": None, "discord": None, "email": None}
    )
    events: list[str] = Field(
        default_factory=lambda: ["breaking_changes", "new_tables", "column_removals"]
    )


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "Schema Track API"
    database_url: str = "sqlite+pysqlite:///./database.sqlite"
    database_connection: str | None = None
    storage_path: Path = Path("storage/schema-track")
    auto_snapshot: bool = True
    snapshot_prefix: str = "schema_snapshot"
    exclude_tables: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_TABLES))
    supported_databases: list[str] = Field(default_factory=lambda: ["mysql", "postgresql", "sqlite"])
    changelog_formats: list[str] = Field(default_factory=lambda: ["markdown", "json", "text"])
    diff_indexes: bool = False
    breaking_changes: BreakingChangeSettings = Field(default_factory=BreakingChangeSettings)
    environments: dict[str, EnvironmentSettings] = Field(
        default_factory=lambda: {
            "staging": EnvironmentSettings(),
            "production": EnvironmentSettings(),
        }
    )
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_TRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def database_label(self) -> str:
        """Connection label recorded on snapshots (explicit name or URL backend)."""

        if self.database_connection:
            return self.database_connection
        return make_url(self.database_url).get_backend_name()


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
