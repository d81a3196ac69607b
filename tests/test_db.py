"""Tests for nikki.db and nikki.settings."""

import pytest
from pydantic import ValidationError as SettingsValidationError

from nikki.db import Database, normalize_database_url
from nikki.settings import Settings


class TestNormalizeDatabaseUrl:
    def test_postgres_scheme(self):
        assert normalize_database_url("postgres://u:p@db:5432/nikki") == "postgresql+asyncpg://u:p@db:5432/nikki"

    def test_postgresql_scheme(self):
        assert normalize_database_url("postgresql://u:p@db/nikki").startswith("postgresql+asyncpg://")

    def test_sslmode_becomes_ssl(self):
        url = normalize_database_url("postgresql://u:p@db/nikki?sslmode=require&channel_binding=require")
        assert url == "postgresql+asyncpg://u:p@db/nikki?ssl=true"

    def test_sqlite_untouched(self):
        assert normalize_database_url("sqlite+aiosqlite:///nikki.db") == "sqlite+aiosqlite:///nikki.db"

    def test_empty(self):
        assert normalize_database_url("") == ""


class TestDatabase:
    async def test_engine_created_once_and_reused(self, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'nikki.db'}")
        assert database._engine is None
        engine = database.engine
        assert database.engine is engine
        assert database.sessionmaker() is database.sessionmaker()
        await database.dispose()
        assert database._engine is None

    async def test_dispose_without_engine(self, tmp_path):
        await Database(f"sqlite+aiosqlite:///{tmp_path / 'nikki.db'}").dispose()


class TestSettings:
    def test_missing_encryption_key_is_fatal(self, monkeypatch):
        monkeypatch.delenv("ENCRYPTION_KEY", raising=False)
        with pytest.raises(SettingsValidationError):
            Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///x.db", SESSION_SECRET="s")

    def test_empty_encryption_key_is_fatal(self):
        with pytest.raises(SettingsValidationError):
            Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///x.db", SESSION_SECRET="s", ENCRYPTION_KEY="")

    def test_defaults(self):
        settings = Settings(
            _env_file=None,
            DATABASE_URL="sqlite+aiosqlite:///x.db",
            SESSION_SECRET="s",
            ENCRYPTION_KEY="k",
        )
        assert settings.session_ttl_days == 7
        assert settings.default_mood_color == "#8b5cf6"
