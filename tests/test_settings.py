"""Tests for repokit.config.settings."""

from pathlib import Path

import pytest

from repokit.config import DatabaseSettings, Settings, get_settings


@pytest.mark.usefixtures("isolated_settings")
class TestSettings:
    def test_defaults(self) -> None:
        settings: Settings = get_settings()
        assert settings.debug is False
        assert settings.default_page_size == 0
        assert settings.validate_entities is True
        assert settings.database.url == "sqlite:///data/repokit.db"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPOKIT_DEBUG", "true")
        monkeypatch.setenv("REPOKIT_DEFAULT_PAGE_SIZE", "25")
        settings: Settings = get_settings()
        assert settings.debug is True
        assert settings.default_page_size == 25

    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_negative_page_size_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from pydantic import ValidationError

        monkeypatch.setenv("REPOKIT_DEFAULT_PAGE_SIZE", "-3")
        with pytest.raises(ValidationError):
            Settings()


@pytest.mark.usefixtures("isolated_settings")
class TestDatabaseSettings:
    def test_database_url_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPOKIT_DB_URL", "sqlite:///other.db")
        monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg2://app:secret@db:5432/app")
        db: DatabaseSettings = DatabaseSettings()
        assert db.url.startswith("postgresql")
        assert db.is_sqlite() is False
        assert db.sqlite_path() is None
        assert "secret" not in db.db_info_for_logging()
        assert ":***@" in db.db_info_for_logging()

    def test_repokit_db_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPOKIT_DB_URL", "sqlite:///var/app.db")
        db: DatabaseSettings = DatabaseSettings()
        assert db.url == "sqlite:///var/app.db"
        assert db.sqlite_path() == Path("var/app.db")

    def test_blank_database_url_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "   ")
        assert DatabaseSettings().url == "sqlite:///data/repokit.db"

    def test_memory_sqlite(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPOKIT_DB_URL", "sqlite:///:memory:")
        db: DatabaseSettings = DatabaseSettings()
        assert db.sqlite_path() is None
        assert db.db_info_for_logging() == "SQLite @ :memory:"
