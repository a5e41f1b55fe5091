"""Datetime helpers shared by domain models. Naive datetimes are treated as UTC."""

from datetime import datetime, timezone
from typing import Optional


def aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return aware(datetime.fromisoformat(value))
