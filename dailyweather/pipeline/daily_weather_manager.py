"""Rolling 7-day daily weather cache backed by a local store and a remote source.

The manager must be created and driven from a running asyncio event loop. All
state changes happen on that loop; store and remote calls run as loop tasks and
only touch state again after checking that the context they were started for is
still the current one.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine, Sequence
from datetime import datetime, timedelta
from typing import Any, Protocol

from dailyweather.ingest.staleness import needs_refresh
from dailyweather.models.common import Timestamp, utc_now
from dailyweather.models.weather import (
    DayWeather,
    HourlyWeatherContext,
    WeatherContext,
    WeatherLocation,
)
from dailyweather.pipeline.listeners import DailyWeatherListener, ListenerSet
from dailyweather.pipeline.window import generate_week_timestamps

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = timedelta(hours=1)


class DailyWeatherSource(Protocol):
    async def fetch_daily_weather(
        self, context: WeatherContext
    ) -> list[DayWeather | None]: ...


class DailyWeatherStore(Protocol):
    async def read_daily_weather(
        self, location: WeatherLocation, timestamps: Sequence[Timestamp]
    ) -> tuple[list[DayWeather], datetime]: ...

    async def write_daily_weather(
        self,
        location: WeatherLocation,
        records: Sequence[DayWeather],
        fetch_date: datetime,
    ) -> None: ...


class DailyWeatherDataManager:
    def __init__(
        self,
        context: WeatherContext,
        server: DailyWeatherSource,
        store: DailyWeatherStore,
        refresh_interval: timedelta = DEFAULT_REFRESH_INTERVAL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._context = context
        self._server = server
        self._store = store
        self._refresh_interval = refresh_interval
        self._clock = clock
        self._listeners: ListenerSet[DailyWeatherListener] = ListenerSet()
        self._tasks: set[asyncio.Task] = set()
        self._timestamps = generate_week_timestamps(context.tzinfo, clock())
        self._daily_weather: dict[Timestamp, DayWeather] = {}
        self._last_fetch = clock()

        self._reload_data()

    # --- Read accessors ---

    @property
    def context(self) -> WeatherContext:
        return self._context

    @property
    def location(self) -> WeatherLocation:
        return self._context.location

    @property
    def timezone(self) -> str:
        return self._context.timezone

    @property
    def timestamps(self) -> list[Timestamp]:
        return list(self._timestamps)

    @property
    def last_fetch_date(self) -> datetime:
        return self._last_fetch

    @property
    def daily_weather(self) -> list[DayWeather | None]:
        """Cached records aligned with ``timestamps``, None where a day is missing."""
        return [self._daily_weather.get(ts) for ts in self._timestamps]

    @property
    def needs_refresh(self) -> bool:
        return needs_refresh(
            self._last_fetch,
            self._refresh_interval,
            self._context.tzinfo,
            self._clock(),
        )

    def get_day_weather(self, timestamp: Timestamp) -> DayWeather | None:
        return self._daily_weather.get(timestamp)

    def get_hourly_weather_context(self, timestamp: Timestamp) -> HourlyWeatherContext:
        return HourlyWeatherContext(
            location=self._context.location,
            timezone=self._context.timezone,
            timestamp=timestamp,
        )

    # --- Listeners ---

    def add_listener(self, listener: DailyWeatherListener) -> None:
        self._listeners.add(listener)

    def remove_listener(self, listener: DailyWeatherListener) -> None:
        self._listeners.remove(listener)

    # --- Transitions ---

    def set_location(self, location: WeatherLocation) -> None:
        self._context = self._context.with_location(location)
        logger.info(
            "Location changed to (%.4f, %.4f), reloading",
            location.latitude, location.longitude,
        )
        self._reload_data()

    def refetch_data_if_needed(self) -> bool:
        """Start a remote fetch if the cache is stale. Returns True if one was issued."""
        if not self.needs_refresh:
            return False
        self._fetch_data_from_server()
        return True

    async def wait_until_idle(self) -> None:
        """Wait for all in-flight store and remote work, including follow-ups."""
        while self._tasks:
            await asyncio.wait(list(self._tasks))

    # --- Pipeline ---

    def _reload_data(self) -> None:
        self._timestamps = generate_week_timestamps(self._context.tzinfo, self._clock())
        self._last_fetch = self._clock()
        self._daily_weather = {}
        self._notify_daily_weather_changed()

        self._spawn(self._fetch_data_from_store, self._context, list(self._timestamps))

    async def _fetch_data_from_store(
        self, context: WeatherContext, timestamps: list[Timestamp]
    ) -> None:
        records, fetch_date = await self._store.read_daily_weather(
            context.location, timestamps
        )
        if self._context != context:
            logger.debug("Discarding stored weather for outdated context %s", context)
            return

        window = set(self._timestamps)
        merged = 0
        for record in records:
            if record.timestamp in window and record.timestamp not in self._daily_weather:
                self._daily_weather[record.timestamp] = record
                merged += 1
        logger.debug(
            "Merged %d of %d stored days (fetched at %s)",
            merged, len(records), fetch_date.isoformat(),
        )
        self._last_fetch = fetch_date
        self._notify_daily_weather_changed()
        self.refetch_data_if_needed()

    def _fetch_data_from_server(self) -> None:
        # Advanced before the call so a second trigger sees a fresh cache
        self._last_fetch = self._clock()
        self._spawn(self._receive_server_data, self._context)

    async def _receive_server_data(self, context: WeatherContext) -> None:
        try:
            daily_weather = await self._server.fetch_daily_weather(context)
        except Exception:
            if self._context != context:
                logger.debug("Ignoring fetch failure for outdated context %s", context)
                return
            self._last_fetch = self._clock() - self._refresh_interval
            logger.exception(
                "Failed to fetch daily weather for (%.4f, %.4f)",
                context.location.latitude, context.location.longitude,
            )
            return

        if self._context != context:
            logger.debug("Discarding fetched weather for outdated context %s", context)
            return

        self._timestamps = generate_week_timestamps(self._context.tzinfo, self._clock())
        window = set(self._timestamps)
        records = [r for r in daily_weather if r is not None]
        self._daily_weather = {r.timestamp: r for r in records if r.timestamp in window}
        self._last_fetch = self._clock()
        logger.info(
            "Fetched %d days, %d in current window",
            len(records), len(self._daily_weather),
        )
        self._notify_daily_weather_changed()

        await self._store.write_daily_weather(context.location, records, self._last_fetch)

    def _notify_daily_weather_changed(self) -> None:
        self._listeners.enumerate_listeners(lambda listener: listener.daily_weather_changed())

    def _spawn(
        self, coro_fn: Callable[..., Coroutine[Any, Any, None]], *args: Any
    ) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(coro_fn(*args))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Daily weather task crashed", exc_info=exc)
