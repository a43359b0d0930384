"""Tests for the explicit database handles."""

import pytest
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from rbac_admin.core.config import Settings
from rbac_admin.db.analytics import ANALYTICS_TABLES, AnalyticsDatabase, analytics_metadata
from rbac_admin.db.session import Database, DatabaseNotInitializedError


class TestDatabase:
    """Test the RBAC database handle lifecycle."""

    def test_use_before_init_raises(self):
        db = Database("sqlite://")
        assert not db.is_initialized
        with pytest.raises(DatabaseNotInitializedError):
            db.session()
        with pytest.raises(DatabaseNotInitializedError):
            db.engine

    def test_init_is_idempotent(self):
        db = Database("sqlite://")
        db.init()
        engine = db.engine
        db.init()
        assert db.engine is engine
        db.shutdown()

    def test_session_roundtrip(self):
        db = Database("sqlite://")
        db.init()
        session = db.session()
        try:
            assert session.execute(text("SELECT 1")).scalar() == 1
        finally:
            session.close()
            db.shutdown()

    def test_shutdown_resets_handle(self):
        db = Database("sqlite://")
        db.init()
        db.shutdown()
        assert not db.is_initialized
        with pytest.raises(DatabaseNotInitializedError):
            db.session()
        # Shutting down twice is harmless
        db.shutdown()

    def test_from_settings(self):
        settings = Settings(_env_file=None, database_url="sqlite:///rbac.db", database_echo=True)
        db = Database.from_settings(settings)
        assert db.url == "sqlite:///rbac.db"
        assert db.engine_kwargs["echo"] is True
        assert not db.is_initialized


class TestAnalyticsDatabase:
    """Test the analytics database handle."""

    def make(self):
        adb = AnalyticsDatabase(
            "sqlite://", schema=None,
            poolclass=StaticPool, connect_args={"check_same_thread": False},
        )
        adb.init()
        return adb

    def test_connect_before_init_raises(self):
        adb = AnalyticsDatabase("sqlite://", schema=None)
        with pytest.raises(DatabaseNotInitializedError):
            adb.connect()

    def test_from_settings_uses_pool_settings(self):
        settings = Settings(
            _env_file=None,
            analytics_database_url="postgresql://a:b@db/analytics",
            analytics_schema="sales",
            analytics_pool_size=7,
        )
        adb = AnalyticsDatabase.from_settings(settings)
        assert adb.schema == "sales"
        assert adb.engine_kwargs["pool_size"] == 7
        assert adb.engine_kwargs["pool_timeout"] == settings.analytics_pool_timeout
        assert adb.engine_kwargs["pool_recycle"] == settings.analytics_pool_recycle

    def test_empty_schema_means_default(self):
        assert AnalyticsDatabase("sqlite://", schema="").schema is None

    def test_missing_tables(self):
        adb = self.make()
        try:
            assert adb.missing_tables() == list(ANALYTICS_TABLES)
            with adb.connect() as conn:
                analytics_metadata.create_all(conn)
                conn.commit()
            assert adb.missing_tables() == []
        finally:
            adb.shutdown()
