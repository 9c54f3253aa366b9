"""Common types and helpers shared across models."""

from datetime import UTC, datetime
from typing import TypeAlias

Timestamp: TypeAlias = int

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)
