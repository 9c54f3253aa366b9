"""Week window generation: seven consecutive local day starts."""

from datetime import datetime, tzinfo

from dailyweather.models.common import Timestamp, utc_now
from dailyweather.utils.dates import midnight_timestamp

DAYS_PER_WEEK = 7
SECONDS_PER_DAY = 86400


def generate_week_timestamps(
    tz: tzinfo, now: datetime | None = None
) -> list[Timestamp]:
    """Return today's local midnight in ``tz`` followed by the next six day starts."""
    if now is None:
        now = utc_now()
    initial = midnight_timestamp(now, tz)
    return [initial + day * SECONDS_PER_DAY for day in range(DAYS_PER_WEEK)]
