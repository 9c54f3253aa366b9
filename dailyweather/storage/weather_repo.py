"""Repository for stored daily weather records."""

import json
import sqlite3
from collections.abc import Sequence
from datetime import datetime

from dailyweather.models.weather import DayWeather, WeatherLocation

COORDINATE_PRECISION = 4


def _key(location: WeatherLocation) -> tuple[float, float]:
    return (
        round(location.latitude, COORDINATE_PRECISION),
        round(location.longitude, COORDINATE_PRECISION),
    )


def save_daily_weather(
    conn: sqlite3.Connection,
    location: WeatherLocation,
    records: Sequence[DayWeather],
    fetched_at: datetime,
) -> int:
    """Upsert records for a location. Returns the number of rows written."""
    lat, lon = _key(location)
    rows = [
        (lat, lon, r.timestamp, json.dumps(r.to_dict()), fetched_at.isoformat())
        for r in records
    ]
    conn.executemany(
        "INSERT INTO daily_weather "
        "(latitude, longitude, day_timestamp, payload_json, fetched_at) "
        "VALUES (?, ?, ?, ?, ?) "
        "ON CONFLICT(latitude, longitude, day_timestamp) DO UPDATE SET "
        "payload_json = excluded.payload_json, fetched_at = excluded.fetched_at",
        rows,
    )
    conn.commit()
    return len(rows)


def get_daily_weather(
    conn: sqlite3.Connection,
    location: WeatherLocation,
    timestamps: Sequence[int],
) -> list[dict]:
    """Get stored rows for a location, limited to the given day timestamps."""
    if not timestamps:
        return []
    lat, lon = _key(location)
    placeholders = ", ".join("?" for _ in timestamps)
    rows = conn.execute(
        "SELECT day_timestamp, payload_json, fetched_at FROM daily_weather "
        f"WHERE latitude = ? AND longitude = ? AND day_timestamp IN ({placeholders}) "
        "ORDER BY day_timestamp",
        (lat, lon, *timestamps),
    ).fetchall()
    return [dict(r) for r in rows]


def delete_before(conn: sqlite3.Connection, day_timestamp: int) -> int:
    """Delete rows for days before ``day_timestamp``. Returns the number deleted."""
    cursor = conn.execute(
        "DELETE FROM daily_weather WHERE day_timestamp < ?", (day_timestamp,)
    )
    conn.commit()
    return cursor.rowcount
