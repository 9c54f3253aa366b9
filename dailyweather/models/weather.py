"""Weather context and daily weather records."""

from dataclasses import asdict, dataclass, replace
from typing import Any
from zoneinfo import ZoneInfo

from dailyweather.models.common import Timestamp


@dataclass(frozen=True)
class WeatherLocation:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class WeatherContext:
    """The (location, timezone) pair a daily weather cache is scoped to.

    Equal contexts compare equal field by field, so a snapshot taken before an
    async call can be compared against the current one when the call returns.
    """

    location: WeatherLocation
    timezone: str  # IANA zone name, e.g. "Europe/Berlin"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def with_location(self, location: WeatherLocation) -> "WeatherContext":
        return replace(self, location=location)


@dataclass(frozen=True)
class HourlyWeatherContext:
    location: WeatherLocation
    timezone: str
    timestamp: Timestamp


@dataclass(frozen=True)
class DayWeather:
    timestamp: Timestamp  # local midnight, seconds since epoch
    weather_code: int
    temperature_max: float
    temperature_min: float
    precipitation_sum: float | None = None
    precipitation_probability_max: int | None = None
    wind_speed_max: float | None = None
    sunrise: Timestamp | None = None
    sunset: Timestamp | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DayWeather":
        return cls(
            timestamp=int(data["timestamp"]),
            weather_code=int(data["weather_code"]),
            temperature_max=float(data["temperature_max"]),
            temperature_min=float(data["temperature_min"]),
            precipitation_sum=data.get("precipitation_sum"),
            precipitation_probability_max=data.get("precipitation_probability_max"),
            wind_speed_max=data.get("wind_speed_max"),
            sunrise=data.get("sunrise"),
            sunset=data.get("sunset"),
        )
