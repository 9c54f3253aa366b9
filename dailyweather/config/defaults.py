"""Default and preset locations."""

from dailyweather.config.schema import LocationConfig

DEFAULT_LOCATION = LocationConfig(
    name="Berlin",
    slug="berlin",
    latitude=52.5235,
    longitude=13.4115,
    timezone="Europe/Berlin",
)

PRESET_LOCATIONS: list[LocationConfig] = [
    DEFAULT_LOCATION,
    LocationConfig(
        name="New York City",
        slug="nyc",
        latitude=40.7128,
        longitude=-74.0060,
        timezone="America/New_York",
    ),
    LocationConfig(
        name="Tokyo",
        slug="tokyo",
        latitude=35.6762,
        longitude=139.6503,
        timezone="Asia/Tokyo",
    ),
    LocationConfig(
        name="Sydney",
        slug="sydney",
        latitude=-33.8688,
        longitude=151.2093,
        timezone="Australia/Sydney",
    ),
]


def get_preset(slug: str) -> LocationConfig:
    for preset in PRESET_LOCATIONS:
        if preset.slug == slug:
            return preset
    known = ", ".join(p.slug for p in PRESET_LOCATIONS)
    raise KeyError(f"Unknown preset location '{slug}' (known: {known})")
