"""Date parsing and ko-KR formatting for scrap metadata."""

import re
from datetime import date, datetime
from email.utils import parsedate_to_datetime
from typing import Optional

from pydantic import TypeAdapter, ValidationError

_DATETIME_ADAPTER = TypeAdapter(datetime)
_DATE_ADAPTER = TypeAdapter(date)

# Integers, decimals and exponents; pydantic would read these as Unix timestamps
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Human-readable forms seen in bylines
_TEXT_FORMATS = [
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y.%m.%d",
    "%Y. %m. %d.",
    "%Y/%m/%d",
]


def parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a published-date string into a date.

    Accepts ISO-8601 dates and datetimes, RFC 2822 dates, and a few
    common byline formats. Bare numbers are rejected rather than read
    as Unix timestamps.

    Args:
        value: Raw attribute or text value

    Returns:
        The calendar date, or None if the value cannot be parsed
    """
    if not value:
        return None
    value = value.strip()
    if not value or _NUMBER_RE.fullmatch(value):
        return None

    for adapter in (_DATETIME_ADAPTER, _DATE_ADAPTER):
        try:
            parsed = adapter.validate_python(value)
        except ValidationError:
            continue
        return parsed.date() if isinstance(parsed, datetime) else parsed

    for fmt in _TEXT_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    try:
        return parsedate_to_datetime(value).date()
    except (TypeError, ValueError, IndexError):
        return None


def format_ko_date(value: date) -> str:
    """Short ko-KR date, e.g. ``2024. 1. 15.``"""
    return f"{value.year}. {value.month}. {value.day}."


def format_ko_datetime(value: datetime) -> str:
    """
    Long ko-KR date and time in local time, e.g. ``2024. 1. 15. 오후 3:04:05``.

    Naive datetimes are taken as local time.
    """
    local = value.astimezone() if value.tzinfo else value
    meridiem = "오전" if local.hour < 12 else "오후"
    hour = local.hour % 12 or 12
    return f"{format_ko_date(local.date())} {meridiem} {hour}:{local.minute:02d}:{local.second:02d}"
