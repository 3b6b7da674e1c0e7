"""
Booking status variants and their mapping to upstream codes.

Upstream systems report statuses as free-form codes ("INPROGRESS", "DONE",
"ON_SITE", ...). They are mapped through a closed table; anything not in the
table falls back to ``BookingStatus.CONFIRMED``.
"""

from enum import Enum
from typing import Dict


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""

    CONFIRMED = "Confirmed"
    ON_SITE = "On Site"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


UNKNOWN_STATUS_FALLBACK = BookingStatus.CONFIRMED

UPSTREAM_STATUS_CODES: Dict[str, BookingStatus] = {
    "CONFIRMED": BookingStatus.CONFIRMED,
    "INPROGRESS": BookingStatus.IN_PROGRESS,
    "IN_PROGRESS": BookingStatus.IN_PROGRESS,
    "DONE": BookingStatus.COMPLETED,
    "COMPLETED": BookingStatus.COMPLETED,
    "CANCELLED": BookingStatus.CANCELLED,
    "CANCELED": BookingStatus.CANCELLED,
    "ONSITE": BookingStatus.ON_SITE,
    "ON_SITE": BookingStatus.ON_SITE,
}

# Numeric codes expected by the status-update endpoint
STATUS_TO_API_CODE: Dict[BookingStatus, str] = {
    BookingStatus.CONFIRMED: "1",
    BookingStatus.ON_SITE: "2",
    BookingStatus.IN_PROGRESS: "3",
    BookingStatus.COMPLETED: "4",
    BookingStatus.CANCELLED: "5",
}


def status_from_upstream(code: str | None) -> BookingStatus:
    """
    Map an upstream status code to a ``BookingStatus``.

    Matching is exact after trimming and upper-casing; unknown or missing
    codes map to ``UNKNOWN_STATUS_FALLBACK``. Internal display names
    ("On Site", "Completed", ...) are accepted as well.
    """
    if not code:
        return UNKNOWN_STATUS_FALLBACK

    normalized = code.strip()

    for status in BookingStatus:
        if status.value == normalized:
            return status

    return UPSTREAM_STATUS_CODES.get(normalized.upper(), UNKNOWN_STATUS_FALLBACK)


def status_to_api_code(status: BookingStatus) -> str:
    """Return the numeric code the backend expects for ``status``."""
    return STATUS_TO_API_CODE[status]
