"""Open-Meteo forecast API client with retry and rate limit handling."""

import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)

OPEN_METEO_BASE_URL = "https://api.open-meteo.com/v1"
DEFAULT_USER_AGENT = "dailyweather/0.1.0"

DAILY_VARIABLES = (
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "precipitation_probability_max",
    "wind_speed_10m_max",
    "sunrise",
    "sunset",
)


class OpenMeteoClient:
    def __init__(
        self,
        base_url: str = OPEN_METEO_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_base_delay: float = 5.0,
    ):
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    async def get_daily_forecast(
        self, latitude: float, longitude: float, timezone: str, days: int = 7
    ) -> dict:
        """Fetch the daily forecast with unix-time day starts in ``timezone``.

        Retries on 503/429 and transport errors with exponential backoff.
        """
        url = f"{self.base_url}/forecast"
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "timezone": timezone,
            "daily": ",".join(DAILY_VARIABLES),
            "timeformat": "unixtime",
            "forecast_days": days,
        }
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}

        last_error: Exception | None = None
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(self.max_retries + 1):
                try:
                    resp = await client.get(url, params=params, headers=headers)
                    if resp.status_code in (503, 429) and attempt < self.max_retries:
                        delay = self.retry_base_delay * (2**attempt)
                        logger.warning(
                            "Open-Meteo returned %d, retrying in %.1fs (attempt %d/%d)",
                            resp.status_code, delay, attempt + 1, self.max_retries,
                        )
                        await asyncio.sleep(delay)
                        continue
                    resp.raise_for_status()
                    return resp.json()
                except httpx.RequestError as e:
                    last_error = e
                    if attempt < self.max_retries:
                        delay = self.retry_base_delay * (2**attempt)
                        logger.warning(
                            "Open-Meteo request error, retrying in %.1fs: %s", delay, e
                        )
                        await asyncio.sleep(delay)
                        continue
                    raise

        assert last_error is not None
        raise last_error
