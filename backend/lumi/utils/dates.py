import logging
from datetime import datetime, date, time, timedelta, timezone
from typing import Optional

import pytz
from dateutil import parser as date_parser

from lumi.core.config import settings

logger = logging.getLogger(__name__)


def local_tz():
    return pytz.timezone(settings.timezone)


def local_now() -> datetime:
    """Current time in the user's timezone"""
    return datetime.now(timezone.utc).astimezone(local_tz())


def to_local(dt: datetime) -> datetime:
    """Convert an aware datetime (naive values are treated as UTC) to local time"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(local_tz())


def local_today(now: Optional[datetime] = None) -> date:
    return to_local(now or local_now()).date()


def local_at(day: date, hour: int, minute: int = 0) -> datetime:
    """Localize a wall-clock time on the given day"""
    return local_tz().localize(datetime.combine(day, time(hour, minute)))


def parse_iso(value: str) -> datetime:
    """Parse an ISO 8601 string; naive values are interpreted in local time"""
    parsed = date_parser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = local_tz().localize(parsed)
    return parsed


def _clock(dt: datetime) -> str:
    return dt.strftime("%I:%M %p").lstrip("0")


def format_due(dt: Optional[datetime], now: Optional[datetime] = None) -> Optional[str]:
    """Human label for a due date: 'Today at 6:00 PM', 'Tomorrow at ...' or 'Oct 21, 6:00 PM'"""
    if dt is None:
        return None

    local_dt = to_local(dt)
    today = local_today(now)

    if local_dt.date() == today:
        return f"Today at {_clock(local_dt)}"
    if local_dt.date() == today + timedelta(days=1):
        return f"Tomorrow at {_clock(local_dt)}"
    return f"{local_dt.strftime('%b')} {local_dt.day}, {_clock(local_dt)}"
