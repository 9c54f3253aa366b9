"""SQLite access for the daily weather store.

The schema version lives in ``PRAGMA user_version``. Migrations are modules named
``v<number>_<name>.py`` under ``migrations/``, each exposing ``up(conn)``; every
module with a number above the stored version is applied in ascending order.
"""

import importlib
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

MIGRATIONS_PACKAGE = "dailyweather.storage.migrations"
MIGRATIONS_DIR = Path(__file__).parent / "migrations"

# Reads and writes run on separate worker threads and may overlap
BUSY_TIMEOUT_SECONDS = 5.0


def connect(
    db_path: str | Path, timeout: float = BUSY_TIMEOUT_SECONDS
) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), timeout=timeout)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


@contextmanager
def open_db(db_path: str | Path) -> Iterator[sqlite3.Connection]:
    """Yield a connection that is closed when the block exits, even on error."""
    conn = connect(db_path)
    try:
        yield conn
    finally:
        conn.close()


def schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def available_migrations() -> list[tuple[int, str]]:
    found = []
    for path in MIGRATIONS_DIR.glob("v[0-9]*_*.py"):
        number = path.stem[1:].split("_", 1)[0]
        found.append((int(number), path.stem))
    return sorted(found)


def run_migrations(conn: sqlite3.Connection) -> list[str]:
    """Bring the schema up to date. Returns the names of the migrations applied."""
    current = schema_version(conn)
    applied = []
    for version, name in available_migrations():
        if version <= current:
            continue
        module = importlib.import_module(f"{MIGRATIONS_PACKAGE}.{name}")
        module.up(conn)
        # PRAGMA does not take bound parameters; version is an int from the file name
        conn.execute(f"PRAGMA user_version = {version:d}")
        conn.commit()
        applied.append(name)
    return applied
