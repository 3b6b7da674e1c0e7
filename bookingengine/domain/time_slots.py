"""
Time-of-day slot generation.
"""

from dataclasses import dataclass
from typing import List

from .dates import format_time_slot


def generate_time_slots(
    start_hour: int,
    end_hour: int,
    break_start: int,
    break_end: int,
    interval_minutes: int,
) -> List[str]:
    """
    Generate ordered ``HH:MM`` slots between business-hour bounds.

    Slots start every ``interval_minutes`` from ``start_hour:00`` while the
    slot start is before ``end_hour:00``. Slots starting inside
    ``[break_start:00, break_end:00)`` are skipped; an empty or inverted
    break (``break_start >= break_end``) excludes nothing.

    Example:
        generate_time_slots(9, 12, 10, 11, 30)
        -> ["09:00", "09:30", "11:00", "11:30"]

    Raises:
        ValueError: If ``interval_minutes`` is not positive
    """
    if interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")

    window_start = start_hour * 60
    window_end = end_hour * 60
    pause_start = break_start * 60
    pause_end = break_end * 60

    slots: List[str] = []
    current = window_start

    while current < window_end:
        if not pause_start <= current < pause_end:
            slots.append(format_time_slot(current // 60, current % 60))
        current += interval_minutes

    return slots


@dataclass(frozen=True)
class BusinessHours:
    """
    Bookable hours offered to customers.
    """
    start_hour: int = 9
    end_hour: int = 17
    break_start: int = 12
    break_end: int = 13
    interval_minutes: int = 30

    def time_slots(self) -> List[str]:
        return generate_time_slots(
            self.start_hour,
            self.end_hour,
            self.break_start,
            self.break_end,
            self.interval_minutes,
        )
