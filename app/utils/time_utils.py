# app/utils/time_utils.py
"""Timezone helpers. Timestamps are stored in UTC and shown in business time."""
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from app.config.settings import get_settings


def get_business_timezone(name: Optional[str] = None) -> tzinfo:
    """Resolve the configured business timezone"""
    return ZoneInfo(name or get_settings().DEFAULT_TIMEZONE)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to an aware UTC datetime. Naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Attach `tz` to a naive datetime, or convert an aware one to it"""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def day_bounds(moment: datetime, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Start and end of the local calendar day containing `moment`, in UTC"""
    local_day = moment.astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day, time.max, tzinfo=tz)
    return to_utc(start), to_utc(end)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, truncated toward zero"""
    seconds = (end - start) / timedelta(seconds=1)
    return int(seconds / 60)
