"""Pydantic v2 configuration schema with strict validation."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from dailyweather.models.weather import WeatherContext, WeatherLocation


class LocationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    name: str
    slug: str
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    timezone: str

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    def to_location(self) -> WeatherLocation:
        return WeatherLocation(latitude=self.latitude, longitude=self.longitude)

    def to_context(self) -> WeatherContext:
        return WeatherContext(location=self.to_location(), timezone=self.timezone)


class SyncConfig(BaseModel):
    model_config = {"extra": "forbid"}

    refresh_interval_minutes: int = Field(default=60, ge=1)
    watch_interval_seconds: int = Field(default=300, ge=1)


class OpenMeteoConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://api.open-meteo.com/v1"
    user_agent: str = "dailyweather/0.1.0"
    timeout: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=5.0, ge=0.0)


class StorageConfig(BaseModel):
    model_config = {"extra": "forbid"}

    db_path: str = "data/weather.db"


class AppConfig(BaseModel):
    model_config = {"extra": "forbid"}

    location: LocationConfig | None = None
    sync: SyncConfig = SyncConfig()
    open_meteo: OpenMeteoConfig = OpenMeteoConfig()
    storage: StorageConfig = StorageConfig()
