"""
Reservation planning and conflict detection.

Availability has two levels. A single-day service occupies exactly one slot
key, so one day can hold many independent bookings at different times. A
multi-day service (``duration_days > 1``) takes every day of its range
out of circulation by adding them to the fully-booked dates; only its start
date also records the booked slot.
"""

from datetime import date as _date
from typing import Iterable, List, Mapping, Optional, Tuple

import pendulum
from pendulum import DateTime

from .dates import parse_time_slot, slot_key
from .exceptions import ValidationConflict
from .models import AvailabilitySnapshot, Booking, Conflict, ConflictReason, ReservationPlan, Service
from .time_slots import BusinessHours
from .workload import WorkdayWindow


class ReservationPlanner:
    """
    Plans, validates and commits reservations against availability.
    """

    def __init__(self, business_hours: BusinessHours, workday: WorkdayWindow | None = None):
        self.business_hours = business_hours
        self.workday = workday or WorkdayWindow()
        self._time_slots: Tuple[str, ...] = tuple(business_hours.time_slots())

    @property
    def time_slots(self) -> Tuple[str, ...]:
        return self._time_slots

    def plan(self, service: Service, start_date: _date, primary_time: Optional[str] = None) -> ReservationPlan:
        """
        Compute the ``duration_days`` consecutive date keys starting at ``start_date``.

        ``primary_time`` may be given when the time is already known;
        otherwise it stays None until ``reserve`` confirms one.
        """
        return ReservationPlan.build(service, start_date, primary_time)

    def first_blocked_date(self, plan: ReservationPlan, availability: AvailabilitySnapshot) -> Optional[str]:
        """Earliest date of the plan that is fully booked, if any."""
        for key in plan.dates:
            if key in availability.fully_booked_dates:
                return key
        return None

    def validate(
        self,
        plan: ReservationPlan,
        time_slot: str,
        availability: AvailabilitySnapshot,
    ) -> Optional[Conflict]:
        """
        Check a plan at ``time_slot`` against availability.

        Returns None when the reservation can be committed, otherwise the
        conflict on the earliest offending date. On the start date a
        fully-booked day is reported before a booked slot.
        """
        start_key = plan.start_key
        requested_slot = f"{start_key}-{time_slot}"

        if time_slot not in self._time_slots:
            return Conflict(reason=ConflictReason.INVALID_TIME, date=start_key, slot_key=requested_slot)

        for index, key in enumerate(plan.dates):
            if key in availability.fully_booked_dates:
                return Conflict(reason=ConflictReason.FULLY_BOOKED, date=key)
            if index == 0 and requested_slot in availability.booked_slots:
                return Conflict(reason=ConflictReason.SLOT_BOOKED, date=key, slot_key=requested_slot)

        return None

    def commit(
        self,
        plan: ReservationPlan,
        time_slot: str,
        availability: AvailabilitySnapshot,
    ) -> AvailabilitySnapshot:
        """
        Return availability with the reservation applied.

        The start-date slot is always booked; every date of the range is
        marked fully booked only for multi-day services.
        """
        booked_slots = availability.booked_slots | {f"{plan.start_key}-{time_slot}"}
        fully_booked = availability.fully_booked_dates

        if plan.is_multi_day:
            fully_booked = fully_booked | set(plan.dates)

        return AvailabilitySnapshot(fully_booked_dates=fully_booked, booked_slots=booked_slots)

    def reserve(
        self,
        plan: ReservationPlan,
        time_slot: str,
        availability: AvailabilitySnapshot,
    ) -> Tuple[ReservationPlan, AvailabilitySnapshot]:
        """
        Validate and commit in one step.

        Raises:
            ValidationConflict: If the reservation collides with availability
        """
        conflict = self.validate(plan, time_slot, availability)
        if conflict is not None:
            raise ValidationConflict(conflict)

        confirmed = ReservationPlan(service=plan.service, dates=plan.dates, primary_time=time_slot)
        return confirmed, self.commit(plan, time_slot, availability)

    def available_times(self, day: _date, availability: AvailabilitySnapshot) -> List[str]:
        """Generated slots still open on ``day``; empty when the day is fully booked."""
        if availability.is_fully_booked(day):
            return []

        return [t for t in self._time_slots if slot_key(day, t) not in availability.booked_slots]

    def booking_window(self, booking: Booking, services: Mapping[str, Service]) -> Tuple[DateTime, DateTime]:
        """
        Wall-clock span a booking keeps its technician busy.

        Multi-day bookings run from the workday start on the first day to the
        workday end on the last day; others last their service duration.
        """
        if booking.is_multi_day:
            start = booking.start_date
            end = booking.end_date
            return (
                pendulum.naive(start.year, start.month, start.day, self.workday.start_hour),
                pendulum.naive(end.year, end.month, end.day, self.workday.end_hour),
            )

        hour, minute = parse_time_slot(booking.time)
        day = booking.start_date
        begin = pendulum.naive(day.year, day.month, day.day, hour, minute)

        service = services.get(booking.service)
        duration = service.duration_minutes if service else self.workday.default_duration_minutes

        return begin, begin.add(minutes=duration)

    def technician_conflict(
        self,
        technician: Optional[str],
        booking: Booking,
        bookings: Iterable[Booking],
        services: Mapping[str, Service],
    ) -> Optional[Booking]:
        """
        Find a booking that would overlap if ``booking`` went to ``technician``.

        Cancelled bookings and ``booking`` itself are ignored. An unassigned
        technician never conflicts.
        """
        if not technician:
            return None

        start, end = self.booking_window(booking, services)

        for other in bookings:
            if other.id == booking.id or other.is_cancelled or other.technician != technician:
                continue

            other_start, other_end = self.booking_window(other, services)
            if start < other_end and end > other_start:
                return other

        return None

    def is_technician_available(
        self,
        technician: Optional[str],
        booking: Booking,
        bookings: Iterable[Booking],
        services: Mapping[str, Service],
    ) -> bool:
        return self.technician_conflict(technician, booking, bookings, services) is None

