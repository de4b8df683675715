"""
Calendar Datetime Utilities

This module provides datetime parsing and formatting utilities:
- parse_timestamp: Parse an inbound timestamp string into an aware datetime
- to_provider_datetime: Build the Google Calendar start/end representation
- read_provider_datetime: Read a Google Calendar start/end value as a string
- format_time_range: Human-readable range for previews and chat replies
- duration_minutes: Whole minutes between two instants, rounded half up
"""

import math
from datetime import datetime
from typing import Any, Optional

import pytz


def get_timezone(tz_name: str):
    return pytz.timezone(tz_name)


def parse_timestamp(value: Any, tz_name: str) -> Optional[datetime]:
    """
    Parse a timestamp string into a timezone-aware datetime.

    Accepts ISO-8601 with an offset or a trailing 'Z', naive ISO-8601
    (interpreted in tz_name), and bare YYYY-MM-DD dates (midnight in tz_name).
    Datetime objects pass through, localized when naive.

    Returns:
        Aware datetime, or None when the value cannot be parsed
    """
    tz = get_timezone(tz_name)

    if isinstance(value, datetime):
        return value if value.tzinfo else tz.localize(value)

    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None

    if dt.tzinfo is None:
        dt = tz.localize(dt)
    return dt


def to_provider_datetime(dt: datetime, tz_name: str) -> dict:
    """Google Calendar EventDateTime payload."""
    return {
        "dateTime": dt.astimezone(pytz.UTC).isoformat().replace("+00:00", "Z"),
        "timeZone": tz_name,
    }


def read_provider_datetime(date_dict: Optional[dict]) -> str:
    """Timed events carry 'dateTime'; all-day events only carry 'date'."""
    if not date_dict:
        return ""
    return date_dict.get("dateTime") or date_dict.get("date") or ""


def _clock(dt: datetime) -> str:
    return dt.strftime("%I:%M %p").lstrip("0")


def format_time_range(start: datetime, end: datetime, tz_name: str) -> str:
    """
    Format a start/end pair for people, e.g.
    'Sun, Dec 15, 2024, 2:00 PM - 3:00 PM PST'.
    """
    tz = get_timezone(tz_name)
    local_start = start.astimezone(tz)
    local_end = end.astimezone(tz)

    start_text = f"{local_start.strftime('%a, %b %d, %Y')}, {_clock(local_start)}"
    if local_start.date() == local_end.date():
        end_text = _clock(local_end)
    else:
        end_text = f"{local_end.strftime('%a, %b %d, %Y')}, {_clock(local_end)}"

    return f"{start_text} - {end_text} {local_end.strftime('%Z')}".strip()


def duration_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, halves rounded up."""
    return int(math.floor((end - start).total_seconds() / 60 + 0.5))
