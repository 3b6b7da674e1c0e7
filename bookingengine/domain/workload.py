"""
Per-technician daily workload aggregation.

A read-only reporting view over committed bookings: it sums the minutes each
technician is committed to on a given day and places every booking on a
timeline spanning the configured workday. Overlapping bookings are reported
as they are; preventing overlap is the reservation planner's job.
"""

from dataclasses import dataclass
from datetime import date as _date
from typing import Iterable, List, Mapping, Sequence

from .dates import as_date, parse_time_slot
from .models import Booking, DailyLoad, Service, Technician, WorkloadLevel, WorkloadSegment


@dataclass(frozen=True)
class WorkdayWindow:
    """
    Technician workday.

    ``window_minutes`` is the full timeline (08:00-18:00 -> 600);
    ``capacity_minutes`` removes the unpaid break (-> 540) and is the base of
    the workload percentage.
    """
    start_hour: int = 8
    end_hour: int = 18
    unpaid_break_minutes: int = 60
    default_duration_minutes: int = 60
    medium_threshold: float = 50.0
    high_threshold: float = 80.0

    @property
    def window_minutes(self) -> int:
        return (self.end_hour - self.start_hour) * 60

    @property
    def capacity_minutes(self) -> int:
        return self.window_minutes - self.unpaid_break_minutes

    def offset_of(self, time_slot: str) -> int:
        """Minutes between the workday start and ``time_slot`` (may be negative)."""
        hour, minute = parse_time_slot(time_slot)
        return (hour - self.start_hour) * 60 + minute

    def classify(self, percentage: float) -> WorkloadLevel:
        if percentage > self.high_threshold:
            return WorkloadLevel.HIGH
        if percentage > self.medium_threshold:
            return WorkloadLevel.MEDIUM
        return WorkloadLevel.LOW


def bookings_on(day: _date, bookings: Iterable[Booking]) -> List[Booking]:
    """Non-cancelled bookings whose date range includes ``day``."""
    target = as_date(day)
    return [b for b in bookings if not b.is_cancelled and b.covers(target)]


class WorkloadAggregator:
    """
    Computes committed minutes and timeline segments per technician.
    """

    def __init__(self, window: WorkdayWindow):
        self.window = window

    def service_duration(self, booking: Booking, services: Mapping[str, Service]) -> int:
        """Configured duration of the booking's service, defaulting when unknown."""
        service = services.get(booking.service)
        if service is None:
            return self.window.default_duration_minutes
        return service.duration_minutes

    def daily_load(
        self,
        technician: Technician,
        day: _date,
        bookings: Iterable[Booking],
        services: Mapping[str, Service],
    ) -> DailyLoad:
        """
        Aggregate one technician's workload for ``day``.

        Multi-day bookings on any day after their start consume the whole
        workday: they count as full capacity and occupy the entire timeline.
        Every other booking is placed at its time of day with its service
        duration. Segments starting outside the timeline are not rendered
        but still count toward ``total_minutes``.
        """
        target = as_date(day)
        window_minutes = self.window.window_minutes
        load = DailyLoad(
            technician=technician,
            date=target,
            capacity_minutes=self.window.capacity_minutes,
        )

        for booking in bookings_on(target, bookings):
            if booking.technician != technician.name:
                continue

            if booking.is_multi_day and target != booking.start_date:
                load.total_minutes += self.window.capacity_minutes
                load.segments.append(
                    WorkloadSegment(offset_minutes=0, duration_minutes=window_minutes, booking=booking)
                )
                continue

            duration = self.service_duration(booking, services)
            offset = self.window.offset_of(booking.time)
            load.total_minutes += duration

            if 0 <= offset < window_minutes:
                load.segments.append(
                    WorkloadSegment(offset_minutes=offset, duration_minutes=duration, booking=booking)
                )

        load.percentage = self.percentage(load.total_minutes)
        load.level = self.window.classify(load.percentage)
        return load

    def team_load(
        self,
        technicians: Sequence[Technician],
        day: _date,
        bookings: Sequence[Booking],
        services: Mapping[str, Service],
    ) -> List[DailyLoad]:
        """Daily load for every technician, in the given order."""
        return [self.daily_load(tech, day, bookings, services) for tech in technicians]

    def percentage(self, total_minutes: int) -> float:
        """Share of capacity committed, clamped to 100."""
        capacity = self.window.capacity_minutes
        if capacity <= 0:
            return 100.0
        return min(total_minutes / capacity * 100, 100.0)

    def left_percent(self, segment: WorkloadSegment) -> float:
        return segment.offset_minutes / self.window.window_minutes * 100

    def width_percent(self, segment: WorkloadSegment) -> float:
        return segment.duration_minutes / self.window.window_minutes * 100
