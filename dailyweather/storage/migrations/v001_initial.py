"""Initial schema: stored daily weather per location and day."""

import sqlite3

DDL = [
    # One row per location and local day start; payload_json holds the record
    """
    CREATE TABLE IF NOT EXISTS daily_weather (
        latitude REAL NOT NULL,
        longitude REAL NOT NULL,
        day_timestamp INTEGER NOT NULL,
        payload_json TEXT NOT NULL,
        fetched_at TEXT NOT NULL,
        PRIMARY KEY (latitude, longitude, day_timestamp)
    )
    """,
    (
        "CREATE INDEX IF NOT EXISTS idx_daily_weather_fetched_at "
        "ON daily_weather(fetched_at)"
    ),
]


def up(conn: sqlite3.Connection) -> None:
    for statement in DDL:
        conn.execute(statement)
    conn.commit()
