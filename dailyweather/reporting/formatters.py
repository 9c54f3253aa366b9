"""Output formatters for the cached week of daily weather."""

import json
from collections.abc import Sequence
from datetime import datetime
from zoneinfo import ZoneInfo

from dailyweather.models.weather import DayWeather

# WMO weather interpretation codes, grouped the way Open-Meteo documents them
WMO_DESCRIPTIONS: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Rime fog",
    51: "Light drizzle",
    53: "Drizzle",
    55: "Dense drizzle",
    56: "Freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Light rain",
    63: "Rain",
    65: "Heavy rain",
    66: "Freezing rain",
    67: "Heavy freezing rain",
    71: "Light snow",
    73: "Snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Light showers",
    81: "Showers",
    82: "Violent showers",
    85: "Snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with hail",
    99: "Thunderstorm with heavy hail",
}


def describe_weather_code(code: int) -> str:
    return WMO_DESCRIPTIONS.get(code, f"Code {code}")


def format_week_text(
    timestamps: Sequence[int],
    days: Sequence[DayWeather | None],
    timezone: str,
) -> str:
    """Plain text table, one line per day of the window."""
    tz = ZoneInfo(timezone)
    lines = [f"=== 7-day weather ({timezone}) ==="]
    for ts, day in zip(timestamps, days):
        label = datetime.fromtimestamp(ts, tz).strftime("%a %Y-%m-%d")
        if day is None:
            lines.append(f"{label}  --")
            continue
        line = (
            f"{label}  {day.temperature_max:5.1f}° / {day.temperature_min:5.1f}°  "
            f"{describe_weather_code(day.weather_code)}"
        )
        if day.precipitation_probability_max is not None:
            line += f" ({day.precipitation_probability_max}% precip)"
        lines.append(line)
    return "\n".join(lines)


def format_week_json(
    timestamps: Sequence[int],
    days: Sequence[DayWeather | None],
    timezone: str,
) -> str:
    """JSON for programmatic consumption; missing days are null."""
    data = {
        "timezone": timezone,
        "days": [
            {"timestamp": ts, "weather": day.to_dict() if day is not None else None}
            for ts, day in zip(timestamps, days)
        ],
    }
    return json.dumps(data, indent=2)
