"""Remote daily weather source: turns Open-Meteo payloads into DayWeather records."""

import logging
from typing import Any

from dailyweather.ingest.open_meteo_client import OpenMeteoClient
from dailyweather.models.weather import DayWeather, WeatherContext
from dailyweather.pipeline.window import DAYS_PER_WEEK, SECONDS_PER_DAY

logger = logging.getLogger(__name__)


class DailyWeatherSourceError(Exception):
    """Raised when the remote payload cannot be turned into daily records."""


class OpenMeteoDailySource:
    def __init__(self, client: OpenMeteoClient, days: int = DAYS_PER_WEEK):
        self.client = client
        self.days = days

    async def fetch_daily_weather(self, context: WeatherContext) -> list[DayWeather | None]:
        """Fetch one record per forecast day; days without core values are None."""
        raw = await self.client.get_daily_forecast(
            context.location.latitude,
            context.location.longitude,
            context.timezone,
            days=self.days,
        )
        return parse_daily_weather(raw)


def parse_daily_weather(raw: dict) -> list[DayWeather | None]:
    daily = raw.get("daily")
    if not isinstance(daily, dict) or not isinstance(daily.get("time"), list):
        raise DailyWeatherSourceError("Response has no daily time series")

    times = _align_to_day_slots(daily["time"])
    result: list[DayWeather | None] = []
    for index, timestamp in enumerate(times):
        result.append(_extract_day(daily, index, timestamp))

    missing = sum(1 for r in result if r is None)
    if missing:
        logger.warning("%d of %d forecast days have no data", missing, len(result))
    return result


def _align_to_day_slots(times: list[Any]) -> list[Any]:
    """Key every day to a whole number of days after the first one.

    Open-Meteo reports real local midnights, which sit an hour off the fixed
    86400-second day window once a daylight-saving change falls inside the week.
    """
    anchor = next((t for t in times if isinstance(t, (int, float))), None)
    if anchor is None:
        return times
    anchor = int(anchor)
    return [
        anchor + round((t - anchor) / SECONDS_PER_DAY) * SECONDS_PER_DAY
        if isinstance(t, (int, float)) else t
        for t in times
    ]


def _extract_day(daily: dict, index: int, timestamp: Any) -> DayWeather | None:
    code = _value_at(daily, "weather_code", index)
    t_max = _value_at(daily, "temperature_2m_max", index)
    t_min = _value_at(daily, "temperature_2m_min", index)
    if timestamp is None or code is None or t_max is None or t_min is None:
        return None

    try:
        return DayWeather(
            timestamp=int(timestamp),
            weather_code=int(code),
            temperature_max=float(t_max),
            temperature_min=float(t_min),
            precipitation_sum=_optional_float(_value_at(daily, "precipitation_sum", index)),
            precipitation_probability_max=_optional_int(
                _value_at(daily, "precipitation_probability_max", index)
            ),
            wind_speed_max=_optional_float(_value_at(daily, "wind_speed_10m_max", index)),
            sunrise=_optional_int(_value_at(daily, "sunrise", index)),
            sunset=_optional_int(_value_at(daily, "sunset", index)),
        )
    except (TypeError, ValueError) as e:
        raise DailyWeatherSourceError(f"Malformed daily values at index {index}: {e}") from e


def _value_at(daily: dict, key: str, index: int) -> Any:
    values = daily.get(key)
    if not isinstance(values, list) or index >= len(values):
        return None
    return values[index]


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)
