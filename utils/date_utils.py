"""
Date and time helpers shared by the store, the slot picker and the day view
"""
from datetime import date, datetime, time
from typing import Union

from config.settings import Config


def parse_date(value: Union[str, date, datetime]) -> date:
    """
    Parse a calendar date.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and full ISO
    timestamps such as ``2024-06-03T00:00:00.000Z`` (the date part is kept).
    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid date: {value!r}")

    text = value.strip()
    try:
        if len(text) > 10:
            return parse_iso_datetime(text).date()
        return datetime.strptime(text, Config.DATE_FORMAT).date()
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}. Expected: YYYY-MM-DD")


def parse_time(value: str) -> time:
    """Parse an ``HH:MM`` string, raising ValueError on bad input"""
    if not isinstance(value, str):
        raise ValueError(f"Invalid time: {value!r}")
    try:
        return datetime.strptime(value.strip(), Config.TIME_FORMAT).time()
    except ValueError:
        raise ValueError(f"Invalid time: {value!r}. Expected: HH:MM")


def is_valid_time(value: str) -> bool:
    try:
        parse_time(value)
        return True
    except ValueError:
        return False


def normalize_time(value):
    """Canonical ``HH:MM`` form of a time, e.g. ' 9:00' -> '09:00'; invalid input is returned as is"""
    try:
        return parse_time(value).strftime(Config.TIME_FORMAT)
    except ValueError:
        return value


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_long_date(value: date) -> str:
    """Format as e.g. 'June 3rd, 2024'"""
    return f"{value.strftime('%B')} {_ordinal(value.day)}, {value.year}"


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z' for UTC"""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid ISO-8601 timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
