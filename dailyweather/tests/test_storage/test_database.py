"""Tests for SQLite connections and schema migrations."""

import sqlite3
from pathlib import Path

import pytest

from dailyweather.storage.database import (
    available_migrations,
    connect,
    open_db,
    run_migrations,
    schema_version,
)


class TestConnect:
    def test_wal_mode(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        mode = db.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode == "wal"
        db.close()

    def test_rows_by_column_name(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        db.execute("CREATE TABLE t (x TEXT)")
        db.execute("INSERT INTO t VALUES ('hello')")
        row = db.execute("SELECT x FROM t").fetchone()
        assert row["x"] == "hello"
        db.close()

    def test_waits_for_busy_writer(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        busy_ms = db.execute("PRAGMA busy_timeout").fetchone()[0]
        assert busy_ms == 5000
        db.close()


class TestOpenDb:
    def test_closed_after_block(self, tmp_path: Path):
        with open_db(tmp_path / "test.db") as db:
            db.execute("SELECT 1")
        with pytest.raises(sqlite3.ProgrammingError):
            db.execute("SELECT 1")

    def test_closed_when_block_raises(self, tmp_path: Path):
        with pytest.raises(RuntimeError):
            with open_db(tmp_path / "test.db") as db:
                raise RuntimeError("boom")
        with pytest.raises(sqlite3.ProgrammingError):
            db.execute("SELECT 1")


class TestMigrations:
    def test_discovers_in_version_order(self):
        migrations = available_migrations()
        assert migrations[0] == (1, "v001_initial")
        assert [v for v, _ in migrations] == sorted(v for v, _ in migrations)

    def test_fresh_database_starts_at_zero(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        assert schema_version(db) == 0
        db.close()

    def test_creates_tables_and_records_version(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        applied = run_migrations(db)
        assert "v001_initial" in applied
        assert schema_version(db) == available_migrations()[-1][0]

        tables = {
            row[0]
            for row in db.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }
        assert "daily_weather" in tables
        db.close()

    def test_idempotent(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        applied1 = run_migrations(db)
        applied2 = run_migrations(db)
        assert len(applied1) > 0
        assert applied2 == []
        db.close()

    def test_version_persists_across_connections(self, tmp_path: Path):
        with open_db(tmp_path / "test.db") as db:
            run_migrations(db)
        with open_db(tmp_path / "test.db") as db:
            assert run_migrations(db) == []
            assert schema_version(db) >= 1
