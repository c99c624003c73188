"""Wall clock and calendar-day helpers shared by the services.

All "calendar day" arithmetic happens on ``date`` objects in the configured
``streak_timezone``; elapsed seconds are never used to decide day boundaries.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from areuok.core.config import get_settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def reference_zone() -> ZoneInfo:
    return ZoneInfo(get_settings().streak_timezone)


def as_utc(value: datetime) -> datetime:
    # naive values are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date(value: datetime) -> date:
    return as_utc(value).astimezone(reference_zone()).date()


def today() -> date:
    return local_date(utcnow())
