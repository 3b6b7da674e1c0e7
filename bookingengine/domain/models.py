"""
Domain models for services, bookings, availability and workload.
"""

from dataclasses import dataclass, field
from datetime import date as _date
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from pendulum import Date

from .dates import as_date, date_range, format_date_key, format_schedule, slot_key
from .status import BookingStatus


@dataclass(frozen=True)
class Technician:
    """A technician bookings can be assigned to."""
    id: int
    name: str


@dataclass(frozen=True)
class Service:
    """
    A bookable service from the catalog.

    ``duration_days`` is the number of consecutive days a reservation of this
    service occupies, counting the start date.
    """
    id: int
    name: str
    duration_minutes: int = 60
    duration_days: int = 1
    category: str = ""

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {self.duration_minutes}")
        if self.duration_days < 1:
            raise ValueError(f"duration_days must be at least 1, got {self.duration_days}")

    @property
    def is_multi_day(self) -> bool:
        return self.duration_days > 1


@dataclass(frozen=True)
class Booking:
    """
    A committed appointment.

    Invariant: ``end_date`` is never before ``start_date``.
    """
    id: int
    service: str  # Service name, as used in the services index
    start_date: Date
    end_date: Date
    time: str
    technician: Optional[str] = None  # None while unassigned
    status: BookingStatus = BookingStatus.CONFIRMED
    customer_name: str = ""

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError(
                f"Booking {self.id}: end date {self.end_date} is before start date {self.start_date}"
            )

    @classmethod
    def for_service(
        cls,
        booking_id: int,
        service: Service,
        start_date: _date,
        time: str,
        **kwargs,
    ) -> "Booking":
        """Create a booking whose end date follows from the service's duration in days."""
        start = as_date(start_date)
        return cls(
            id=booking_id,
            service=service.name,
            start_date=start,
            end_date=start.add(days=service.duration_days - 1),
            time=time,
            **kwargs,
        )

    @property
    def is_multi_day(self) -> bool:
        return self.end_date > self.start_date

    @property
    def is_cancelled(self) -> bool:
        return self.status is BookingStatus.CANCELLED

    def covers(self, day: _date) -> bool:
        """Check if ``day`` lies within ``[start_date, end_date]``."""
        return self.start_date <= as_date(day) <= self.end_date

    def schedule_label(self) -> str:
        return format_schedule(self.start_date, self.end_date, self.time)


@dataclass(frozen=True)
class AvailabilitySnapshot:
    """
    Immutable pair of fully-booked dates and booked slot keys.

    Two snapshots are equal when both sets are equal by value.
    """
    fully_booked_dates: FrozenSet[str] = frozenset()
    booked_slots: FrozenSet[str] = frozenset()

    @classmethod
    def from_keys(
        cls,
        fully_booked_dates: Iterable[str] = (),
        booked_slots: Iterable[str] = (),
    ) -> "AvailabilitySnapshot":
        return cls(
            fully_booked_dates=frozenset(fully_booked_dates),
            booked_slots=frozenset(booked_slots),
        )

    def is_fully_booked(self, day: _date) -> bool:
        return format_date_key(day) in self.fully_booked_dates

    def is_slot_booked(self, day: _date, time_slot: str) -> bool:
        return slot_key(day, time_slot) in self.booked_slots

    def is_slot_available(self, day: _date, time_slot: str) -> bool:
        """A slot is available only if its day is open and the slot itself is free."""
        return not self.is_fully_booked(day) and not self.is_slot_booked(day, time_slot)

    def sorted_fully_booked(self) -> List[str]:
        # DateKeys sort chronologically as plain strings
        return sorted(self.fully_booked_dates)

    def sorted_booked_slots(self) -> List[str]:
        return sorted(self.booked_slots)

    def to_payload(self) -> Dict[str, List[str]]:
        """Serialise to the persistence collaborator's wire shape."""
        return {
            "fullyBookedDates": self.sorted_fully_booked(),
            "bookedSlots": self.sorted_booked_slots(),
        }


@dataclass(frozen=True)
class ReservationPlan:
    """
    The consecutive dates a reservation of ``service`` would occupy.

    ``primary_time`` is the start-date slot; None until a time is chosen.
    """
    service: Service
    dates: Tuple[str, ...]
    primary_time: Optional[str] = None

    @property
    def start_key(self) -> str:
        return self.dates[0]

    @property
    def end_key(self) -> str:
        return self.dates[-1]

    @property
    def is_multi_day(self) -> bool:
        return self.service.is_multi_day

    @classmethod
    def build(cls, service: Service, start_date: _date, primary_time: Optional[str] = None) -> "ReservationPlan":
        keys = tuple(format_date_key(d) for d in date_range(start_date, service.duration_days))
        return cls(service=service, dates=keys, primary_time=primary_time)


class ConflictReason(str, Enum):
    INVALID_TIME = "invalid-time"
    FULLY_BOOKED = "fully-booked"
    SLOT_BOOKED = "slot-booked"


@dataclass(frozen=True)
class Conflict:
    """Why a reservation cannot be committed, anchored to the earliest offending date."""
    reason: ConflictReason
    date: str
    slot_key: Optional[str] = None

    def describe(self) -> str:
        if self.reason is ConflictReason.INVALID_TIME:
            return f"{self.slot_key or self.date} is not a bookable time slot"
        if self.reason is ConflictReason.FULLY_BOOKED:
            return f"{self.date} is fully booked"
        return f"Slot {self.slot_key} is already booked"


class WorkloadLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class WorkloadSegment:
    """One booking placed on a technician's daily timeline."""
    offset_minutes: int
    duration_minutes: int
    booking: Booking


@dataclass
class DailyLoad:
    """Committed minutes and timeline placement for one technician on one day."""
    technician: Technician
    date: Date
    total_minutes: int = 0
    capacity_minutes: int = 0
    segments: List[WorkloadSegment] = field(default_factory=list)
    percentage: float = 0.0
    level: WorkloadLevel = WorkloadLevel.LOW

    @property
    def total_hours(self) -> float:
        return self.total_minutes / 60
