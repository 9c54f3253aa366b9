"""Shared test fixtures."""

import asyncio
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import yaml

from dailyweather.models.common import EPOCH
from dailyweather.models.weather import DayWeather, WeatherContext, WeatherLocation

BERLIN = WeatherLocation(latitude=52.5235, longitude=13.4115)


class FakeClock:
    """Mutable clock handed to the manager in place of utc_now."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeStore:
    """In-memory local store. Reads wait on ``gate`` while it is set and closed."""

    def __init__(self) -> None:
        self.data: dict[WeatherLocation, tuple[list[DayWeather], datetime]] = {}
        self.gate: asyncio.Event | None = None
        self.read_calls: list[tuple[WeatherLocation, list[int]]] = []
        self.write_calls: list[tuple[WeatherLocation, list[DayWeather], datetime]] = []

    async def read_daily_weather(
        self, location: WeatherLocation, timestamps: Sequence[int]
    ) -> tuple[list[DayWeather], datetime]:
        self.read_calls.append((location, list(timestamps)))
        if self.gate is not None:
            await self.gate.wait()
        records, fetch_date = self.data.get(location, ([], EPOCH))
        return [r for r in records if r.timestamp in timestamps], fetch_date

    async def write_daily_weather(
        self,
        location: WeatherLocation,
        records: Sequence[DayWeather],
        fetch_date: datetime,
    ) -> None:
        self.write_calls.append((location, list(records), fetch_date))


class FakeServer:
    """Remote source answering from ``respond(context)``; waits on ``gate`` if set."""

    def __init__(self) -> None:
        self.respond: Callable[[WeatherContext], list[DayWeather | None]] = lambda c: []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.calls: list[WeatherContext] = []

    async def fetch_daily_weather(self, context: WeatherContext) -> list[DayWeather | None]:
        self.calls.append(context)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.respond(context)


class CountingListener:
    def __init__(self) -> None:
        self.count = 0

    def daily_weather_changed(self) -> None:
        self.count += 1


def make_day(timestamp: int, weather_code: int = 3, t_max: float = 10.0) -> DayWeather:
    return DayWeather(
        timestamp=timestamp,
        weather_code=weather_code,
        temperature_max=t_max,
        temperature_min=t_max - 8.0,
        precipitation_probability_max=20,
    )


@pytest.fixture
def clock() -> FakeClock:
    # 13:00 in Berlin
    return FakeClock(datetime(2026, 2, 10, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def berlin_context() -> WeatherContext:
    return WeatherContext(location=BERLIN, timezone="Europe/Berlin")


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def day_factory() -> Callable[..., DayWeather]:
    return make_day


@pytest.fixture
def open_meteo_payload() -> Callable[[Sequence[int]], dict]:
    """Build an Open-Meteo daily response for the given day starts."""

    def _build(timestamps: Sequence[int], weather_code: int = 3) -> dict:
        n = len(timestamps)
        return {
            "latitude": 52.52,
            "longitude": 13.419998,
            "timezone": "Europe/Berlin",
            "daily_units": {"time": "unixtime", "temperature_2m_max": "°C"},
            "daily": {
                "time": list(timestamps),
                "weather_code": [weather_code] * n,
                "temperature_2m_max": [8.5 + i for i in range(n)],
                "temperature_2m_min": [1.5 + i for i in range(n)],
                "precipitation_sum": [0.4] * n,
                "precipitation_probability_max": [35] * n,
                "wind_speed_10m_max": [14.2] * n,
                "sunrise": [ts + 27000 for ts in timestamps],
                "sunset": [ts + 61200 for ts in timestamps],
            },
        }

    return _build


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a config YAML pointing at a test Open-Meteo host and temp DB."""
    data = {
        "location": {
            "name": "Berlin",
            "slug": "berlin",
            "latitude": 52.5235,
            "longitude": 13.4115,
            "timezone": "Europe/Berlin",
        },
        "sync": {"refresh_interval_minutes": 30},
        "open_meteo": {
            "base_url": "https://test-om.example.com/v1",
            "max_retries": 0,
            "retry_base_delay": 0.0,
        },
        "storage": {"db_path": str(tmp_path / "weather.db")},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def listener() -> CountingListener:
    return CountingListener()
