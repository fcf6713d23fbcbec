"""Time utilities: timezone-aware helpers plus the chat time/date parsers."""
from __future__ import annotations
import re
from datetime import date, datetime, timezone
from typing import Optional

import pytz

__all__ = [
    "utc_now",
    "iso_utc",
    "local_today",
    "convert_military_to_12_hour",
    "standardize_time_for_backend",
    "parse_natural_language_date",
]

_MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

_MILITARY_RE = re.compile(r"^(\d{1,2})(?::?(\d{2}))?\s*hours?$", re.IGNORECASE)
_CLOCK_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(AM|PM)$")
_NATURAL_DATE_RE = re.compile(r"^([a-zA-Z]+)\s+(\d{1,2})(?:st|nd|rd|th)?$", re.IGNORECASE)


def utc_now() -> datetime:
    """Return an aware UTC datetime."""
    return datetime.now(timezone.utc)


def iso_utc(dt: Optional[datetime] = None) -> str:
    """Return ISO8601 string with Z suffix for given datetime (defaults to now)."""
    if dt is None:
        dt = utc_now()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def local_today(tz_name: str) -> date:
    """Today's date in the spa's configured timezone."""
    return utc_now().astimezone(pytz.timezone(tz_name)).date()


def convert_military_to_12_hour(time_str: str) -> str:
    """'1730 hours' -> '5:30 PM'. Anything that is not military time passes through."""
    match = _MILITARY_RE.match(time_str.strip())
    if not match:
        return time_str
    hours = int(match.group(1))
    minutes = match.group(2) or "00"
    if hours > 23 or int(minutes) > 59:
        return time_str
    period = "PM" if hours >= 12 else "AM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{minutes} {period}"


def standardize_time_for_backend(time_str: str) -> str:
    """Normalize a captured time to the 'H:MM AM' form the spa API stores.

    '2 pm' -> '2:00 PM', '2:30p.m.' -> '2:30 PM', '1730 hours' -> '5:30 PM'.
    """
    cleaned = time_str.strip()
    if re.search(r"hours?$", cleaned, re.IGNORECASE):
        return convert_military_to_12_hour(cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned.replace(".", "").upper())
    match = _CLOCK_RE.match(cleaned)
    if not match:
        return cleaned
    minutes = match.group(2) or "00"
    return f"{int(match.group(1))}:{minutes} {match.group(3)}"


def parse_natural_language_date(
    date_str: str,
    year: Optional[str | int] = None,
    today: Optional[date] = None,
    prefer_future: bool = True,
) -> str:
    """Turn 'August 19th' (+ optional year) into 'YYYY-MM-DD'.

    Without an explicit year the current year is used; with prefer_future the
    date rolls to next year once it has passed. Raises ValueError on anything
    that is not a real month/day.
    """
    match = _NATURAL_DATE_RE.match(date_str.strip())
    if not match:
        raise ValueError(f"Unrecognized date: {date_str!r}")
    month = _MONTHS.get(match.group(1).lower())
    if month is None:
        raise ValueError(f"Unknown month in date: {date_str!r}")
    day = int(match.group(2))
    today = today or utc_now().date()

    if year:
        return date(int(year), month, day).isoformat()

    candidate = date(today.year, month, day)
    if prefer_future and candidate < today:
        candidate = date(today.year + 1, month, day)
    return candidate.isoformat()
