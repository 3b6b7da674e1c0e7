"""
Date and slot key helpers.

Every DateKey in the engine is produced here from local calendar fields
(year, month, day) so that no code path ever slices an ISO/UTC timestamp.
"""

import re
from datetime import date as _date
from datetime import datetime as _datetime
from typing import List, Tuple

import pendulum
from pendulum import Date, DateTime

DATE_KEY_FORMAT = "YYYY-MM-DD"

_DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_SLOT_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")


def as_date(value: _date) -> Date:
    """Normalise any ``date``/``datetime`` to a pendulum ``Date`` (local midnight)."""
    if isinstance(value, Date) and not isinstance(value, _datetime):
        return value
    return pendulum.date(value.year, value.month, value.day)


def today(tz: str | None = None) -> Date:
    """Return the current calendar day on the client's local clock."""
    return pendulum.today(tz or "local").date()


def format_date_key(value: _date) -> str:
    """Format a date as a canonical ``YYYY-MM-DD`` key."""
    return as_date(value).format(DATE_KEY_FORMAT)


def parse_date_key(key: str) -> Date:
    """
    Parse a ``YYYY-MM-DD`` key into a ``Date``.

    Raises:
        ValueError: If the key is not a valid calendar date in canonical form
    """
    if not isinstance(key, str) or not _DATE_KEY_PATTERN.match(key):
        raise ValueError(f"Invalid date key: {key!r} (expected YYYY-MM-DD)")

    return pendulum.from_format(key, DATE_KEY_FORMAT).date()


def date_from_upstream(value: str, tz: str | None = None) -> Date:
    """
    Calendar day of an upstream date or timestamp.

    Bare ``YYYY-MM-DD`` keys are taken as they are. Timestamps are converted
    to ``tz`` (default: the local zone) before the day is read, so
    ``2024-06-09T17:00:00Z`` is 2024-06-10 in Asia/Jakarta.

    Raises:
        ValueError: If the value is neither a DateKey nor a timestamp
    """
    text = value.strip() if isinstance(value, str) else ""
    if _DATE_KEY_PATTERN.match(text):
        return parse_date_key(text)

    # Parse the timestamp (might be in any timezone)
    moment = pendulum.parse(text) if text else None

    if isinstance(moment, DateTime):
        return moment.in_timezone(tz or "local").date()

    raise ValueError(f"Invalid date or timestamp: {value!r}")


def parse_time_slot(text: str) -> Tuple[int, int]:
    """
    Split an ``HH:MM`` slot into hour and minute.

    Raises:
        ValueError: If the text is not a valid 24h time of day
    """
    match = _TIME_SLOT_PATTERN.match(text or "")
    if not match:
        raise ValueError(f"Invalid time slot: {text!r} (expected HH:MM)")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time slot: {text!r} (out of range)")

    return hour, minute


def format_time_slot(hour: int, minute: int) -> str:
    """Render hour and minute as a zero-padded ``HH:MM`` slot."""
    return f"{hour:02d}:{minute:02d}"


def slot_key(value: _date, time_slot: str) -> str:
    """Build the ``YYYY-MM-DD-HH:MM`` key identifying one bookable unit."""
    return f"{format_date_key(value)}-{time_slot}"


def split_slot_key(key: str) -> Tuple[Date, str]:
    """
    Split a slot key back into its date and time slot.

    Raises:
        ValueError: If the key is malformed
    """
    if len(key) != 16 or key[10] != "-":
        raise ValueError(f"Invalid slot key: {key!r} (expected YYYY-MM-DD-HH:MM)")

    date_part, time_part = key[:10], key[11:]
    parse_time_slot(time_part)
    return parse_date_key(date_part), time_part


def date_range(start: _date, days: int) -> List[Date]:
    """Return ``days`` consecutive dates beginning with ``start``."""
    first = as_date(start)
    return [first.add(days=offset) for offset in range(days)]


def format_schedule(start: _date, end: _date, time_slot: str) -> str:
    """
    Human schedule label for a booking.

    Single-day bookings show the date and time, multi-day bookings the range:
    ``2024-06-10 - 10:00`` or ``2024-06-10 s/d 2024-06-12``.
    """
    start_key = format_date_key(start)
    end_key = format_date_key(end)

    if start_key == end_key:
        return f"{start_key} - {time_slot}"
    return f"{start_key} s/d {end_key}"
