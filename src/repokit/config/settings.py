"""Settings using Pydantic.

DB selection:
  - DATABASE_URL set and non-empty -> that URL.
  - otherwise REPOKIT_DB_URL, default sqlite:///data/repokit.db.
.env is loaded from the working directory before any settings are built.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _ensure_env_loaded() -> None:
    """Load .env from the working directory if present. Idempotent."""
    candidate = Path.cwd() / ".env"
    if candidate.exists():
        load_dotenv(candidate, override=False)


_ensure_env_loaded()


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="REPOKIT_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: Optional[str] = Field(
        default=None,
        description="Explicit DSN; wins over REPOKIT_DB_URL when set.",
        validation_alias="DATABASE_URL",
    )
    default_url: str = Field(
        default="sqlite:///data/repokit.db",
        description="DSN used when DATABASE_URL is not set",
        validation_alias="REPOKIT_DB_URL",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Connection recycle time in seconds")

    @property
    def url(self) -> str:
        """Single source of truth for engine creation."""
        explicit = (self.database_url or "").strip()
        return explicit or self.default_url

    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def sqlite_path(self) -> Optional[Path]:
        """Filesystem path of a file-backed SQLite URL, else None."""
        if not self.is_sqlite():
            return None
        raw = self.url.split("///", 1)[-1] if "///" in self.url else ""
        if not raw or raw == ":memory:":
            return None
        return Path(raw)

    def db_info_for_logging(self) -> str:
        """Backend type plus path or redacted DSN, for startup logs."""
        import re

        path = self.sqlite_path()
        if self.is_sqlite():
            return f"SQLite @ {path.as_posix() if path else ':memory:'}"
        return re.sub(r":([^:@/]+)@", r":***@", self.url)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REPOKIT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Log every repository call and echo SQL")
    default_page_size: int = Field(default=0, ge=0, description="Page size when none is given; 0 = unbounded")
    validate_entities: bool = Field(default=True, description="Run schema validation on create/update")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
