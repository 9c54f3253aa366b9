"""Async local store for daily weather, backed by SQLite in a worker thread."""

import asyncio
import json
import logging
import sqlite3
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from dailyweather.models.common import EPOCH, Timestamp
from dailyweather.models.weather import DayWeather, WeatherLocation
from dailyweather.pipeline.window import SECONDS_PER_DAY
from dailyweather.storage import weather_repo
from dailyweather.storage.database import open_db, run_migrations

logger = logging.getLogger(__name__)


class SqliteDailyWeatherStore:
    """Reads and writes daily weather without blocking the event loop.

    Each call opens its own connection inside the worker thread. Database errors
    are logged and reported as an empty read or a dropped write. Use ``open()``
    to get a store whose schema is ready.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    @classmethod
    async def open(cls, db_path: str | Path) -> "SqliteDailyWeatherStore":
        """Create the database file if needed and migrate it off the event loop."""
        store = cls(db_path)
        await asyncio.to_thread(store._prepare)
        return store

    def _prepare(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with open_db(self.db_path) as conn:
            applied = run_migrations(conn)
        if applied:
            logger.info("Applied migrations: %s", ", ".join(applied))

    async def read_daily_weather(
        self, location: WeatherLocation, timestamps: Sequence[Timestamp]
    ) -> tuple[list[DayWeather], datetime]:
        """Return stored records for the requested days and when they were fetched.

        The fetch date is the oldest among the returned rows, or the epoch when
        nothing is stored.
        """
        return await asyncio.to_thread(self._read, location, list(timestamps))

    async def write_daily_weather(
        self,
        location: WeatherLocation,
        records: Sequence[DayWeather],
        fetch_date: datetime,
    ) -> None:
        await asyncio.to_thread(self._write, location, list(records), fetch_date)

    def _read(
        self, location: WeatherLocation, timestamps: list[Timestamp]
    ) -> tuple[list[DayWeather], datetime]:
        try:
            with open_db(self.db_path) as conn:
                rows = weather_repo.get_daily_weather(conn, location, timestamps)
        except sqlite3.Error:
            logger.exception("Failed to read stored daily weather")
            return [], EPOCH

        records: list[DayWeather] = []
        fetch_dates: list[datetime] = []
        for row in rows:
            try:
                records.append(DayWeather.from_dict(json.loads(row["payload_json"])))
                fetch_dates.append(datetime.fromisoformat(row["fetched_at"]))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping corrupt stored day %s", row["day_timestamp"])

        if not records:
            return [], EPOCH
        return records, min(fetch_dates)

    def _write(
        self,
        location: WeatherLocation,
        records: list[DayWeather],
        fetch_date: datetime,
    ) -> None:
        if not records:
            return
        try:
            with open_db(self.db_path) as conn:
                written = weather_repo.save_daily_weather(conn, location, records, fetch_date)
                oldest = min(r.timestamp for r in records)
                pruned = weather_repo.delete_before(conn, oldest - SECONDS_PER_DAY)
        except sqlite3.Error:
            logger.exception("Failed to store daily weather")
            return
        logger.debug("Stored %d days, pruned %d old rows", written, pruned)
