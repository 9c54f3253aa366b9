"""Timezone-aware calendar helpers."""

from datetime import datetime, tzinfo


def midnight(instant: datetime, tz: tzinfo) -> datetime:
    """Truncate an instant to the start of its calendar day in ``tz``."""
    local = instant.astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def midnight_timestamp(instant: datetime, tz: tzinfo) -> int:
    return round(midnight(instant, tz).timestamp())


def same_date(a: datetime, b: datetime, tz: tzinfo) -> bool:
    """Check whether two instants fall on the same calendar day in ``tz``."""
    return a.astimezone(tz).date() == b.astimezone(tz).date()
