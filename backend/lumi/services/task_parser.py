"""
Natural-language task capture.

Turns input like "buy groceries tomorrow at 6pm" into a task title plus a
due/reminder date in the user's timezone. Date expressions are located with
parsedatetime; when none is present the task defaults to this evening.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import parsedatetime
from pydantic import BaseModel

from lumi.core.config import settings
from lumi.utils.dates import local_now, local_tz, local_at, to_local

logger = logging.getLogger(__name__)

DATE_FLAG = 1
TIME_FLAG = 2

CONNECTORS = {"", "at", "on", "by", ","}
LEADING_PREPOSITION = re.compile(r"^(at|on|by|for)\s+", re.IGNORECASE)
TRAILING_PREPOSITION = re.compile(r"\s+(at|on|by|for)$", re.IGNORECASE)

_calendar = parsedatetime.Calendar(version=parsedatetime.VERSION_CONTEXT_STYLE)


class ParsedTask(BaseModel):
    title: str
    due_date: Optional[datetime] = None
    reminder_date: Optional[datetime] = None
    status: str = "todo"
    created_at: datetime


class DateMatch(BaseModel):
    value: datetime
    flags: int
    start: int
    end: int

    @property
    def has_date(self) -> bool:
        return bool(self.flags & DATE_FLAG)

    @property
    def has_time(self) -> bool:
        return bool(self.flags & TIME_FLAG)


def _flag_value(flags) -> int:
    # Context style returns a pdtContext, flag style an int
    return int(getattr(flags, "dateTimeFlag", flags) or 0)


def find_date_expressions(text: str, source: datetime) -> List[DateMatch]:
    """Locate date/time expressions, merging 'tomorrow' + 'at 6pm' style neighbours"""
    results = _calendar.nlp(text, sourceTime=source.timetuple())
    if not results:
        return []

    matches = [
        DateMatch(value=value, flags=_flag_value(flags), start=start, end=end)
        for value, flags, start, end, _matched in results
    ]
    matches = [m for m in matches if m.flags]
    matches.sort(key=lambda m: m.start)

    merged: List[DateMatch] = []
    for match in matches:
        if merged:
            previous = merged[-1]
            between = text[previous.end:match.start].strip().lower()
            complementary = (
                (previous.flags == DATE_FLAG and match.flags == TIME_FLAG)
                or (previous.flags == TIME_FLAG and match.flags == DATE_FLAG)
            )
            if complementary and between in CONNECTORS:
                date_part = previous if previous.has_date else match
                time_part = match if date_part is previous else previous
                merged[-1] = DateMatch(
                    value=datetime.combine(date_part.value.date(), time_part.value.time()),
                    flags=DATE_FLAG | TIME_FLAG,
                    start=previous.start,
                    end=match.end,
                )
                continue
        merged.append(match)

    return merged


def _strip_title(text: str, start: int, end: int) -> str:
    before = text[:start].strip()
    after = text[end:].strip()

    title = f"{before} {after}".strip()
    title = re.sub(r"\s+", " ", title)
    title = LEADING_PREPOSITION.sub("", title)
    title = TRAILING_PREPOSITION.sub("", title)
    return title.strip()


def _resolve(match: DateMatch, now: datetime) -> datetime:
    """Apply default-time and future-date heuristics to a parsed expression"""
    tz = local_tz()

    if match.has_date and not match.has_time:
        return local_at(match.value.date(), settings.default_task_hour)

    resolved = tz.localize(match.value.replace(second=0, microsecond=0))
    if match.has_time and not match.has_date and resolved < now:
        resolved = local_at(resolved.date() + timedelta(days=1), resolved.hour, resolved.minute)
    return resolved


def default_due_date(now: datetime) -> datetime:
    """Tonight at the default hour, or tomorrow night once that hour has passed"""
    target_day = now.date()
    if now.hour >= settings.default_task_hour:
        target_day = target_day + timedelta(days=1)
    return local_at(target_day, settings.default_task_hour)


def parse_task_input(user_input: str, now: Optional[datetime] = None) -> ParsedTask:
    """Parse free text into a task with title and due/reminder dates"""

    if user_input is None or not user_input.strip():
        raise ValueError("Task input cannot be empty")

    now = to_local(now) if now else local_now()
    text = user_input.strip()
    title = text

    source = now.replace(tzinfo=None)
    matches = find_date_expressions(text, source)

    if matches:
        first = matches[0]
        stripped = _strip_title(text, first.start, first.end)
        if stripped:
            title = stripped
        due = _resolve(first, now)
        logger.debug(f"Parsed date expression '{text[first.start:first.end]}' -> {due.isoformat()}")
    else:
        due = default_due_date(now)

    return ParsedTask(
        title=title,
        due_date=due,
        reminder_date=due,
        status="todo",
        created_at=datetime.now(timezone.utc),
    )
