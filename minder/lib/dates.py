"""Local calendar-date helpers.

Every day in minder is a local `YYYY-MM-DD` string. Anything that turns a
date or datetime into a day string, or a day string back into a date, goes
through this module so the local-vs-UTC rule lives in one place.
"""

import re
from datetime import date, datetime, timedelta

from dateutil import parser as dateutil_parser
from dateutil.parser import ParserError

from ..core.errors import ValidationError
from . import clock

__all__ = [
    "add_days",
    "days_ago",
    "enumerate_dates",
    "format_local_date",
    "parse_day_ref",
    "parse_local_date",
    "year_start",
]

_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def format_local_date(d: date | datetime) -> str:
    """Format using the local year/month/day, never a UTC conversion."""
    if isinstance(d, datetime):
        if d.tzinfo is not None:
            d = d.astimezone()
        d = d.date()
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_local_date(value: str) -> date:
    if not isinstance(value, str) or not _DAY_RE.match(value):
        raise ValidationError(f"invalid date '{value}' (expected YYYY-MM-DD)")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"invalid date '{value}' (expected YYYY-MM-DD)") from None


def add_days(day: str, n: int) -> str:
    return format_local_date(parse_local_date(day) + timedelta(days=n))


def days_ago(n: int, today: str | None = None) -> str:
    base = today if today is not None else format_local_date(clock.today())
    return add_days(base, -n)


def enumerate_dates(start: str, end: str) -> list[str]:
    """Inclusive ascending day strings from start to end; empty if start > end."""
    first = parse_local_date(start)
    last = parse_local_date(end)
    if first > last:
        return []
    return [format_local_date(first + timedelta(days=i)) for i in range((last - first).days + 1)]


def year_start(day: str) -> str:
    return format_local_date(parse_local_date(day).replace(month=1, day=1))


def parse_day_ref(ref: str | None, today: str | None = None) -> str:
    """Resolve 'today', 'yesterday', YYYY-MM-DD or a free-form date to a day string.

    Future days are rejected: completions are only ever recorded up to today.
    """
    today_str = today if today is not None else format_local_date(clock.today())
    if ref is None or not ref.strip():
        return today_str
    ref_lower = ref.strip().lower()
    if ref_lower == "today":
        day = today_str
    elif ref_lower == "yesterday":
        day = add_days(today_str, -1)
    elif _DAY_RE.match(ref_lower):
        day = format_local_date(parse_local_date(ref_lower))
    else:
        base = parse_local_date(today_str)
        try:
            parsed = dateutil_parser.parse(
                ref, default=datetime(base.year, base.month, base.day)
            )
        except (ParserError, ValueError, OverflowError):
            raise ValidationError(f"could not understand date '{ref}'") from None
        day = format_local_date(parsed.date())
    if day > today_str:
        raise ValidationError(f"{day} is in the future")
    return day
