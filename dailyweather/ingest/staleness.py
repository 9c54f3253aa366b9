"""Staleness check for the cached daily weather window."""

from datetime import datetime, timedelta, tzinfo

from dailyweather.models.common import utc_now
from dailyweather.utils.dates import same_date


def needs_refresh(
    last_fetch: datetime,
    refresh_interval: timedelta,
    tz: tzinfo,
    now: datetime | None = None,
) -> bool:
    """Check if the cache is due for a remote refresh.

    Stale once ``refresh_interval`` has elapsed since ``last_fetch`` (inclusive),
    or as soon as local midnight in ``tz`` has passed since then.
    """
    if now is None:
        now = utc_now()
    if now - last_fetch >= refresh_interval:
        return True
    return not same_date(now, last_fetch, tz)


def fetch_age_minutes(last_fetch: datetime, now: datetime | None = None) -> float:
    """Get the age of the last fetch in minutes."""
    if now is None:
        now = utc_now()
    return (now - last_fetch).total_seconds() / 60
