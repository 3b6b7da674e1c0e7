"""
Customer booking flow.

Coordinates the calendar, the reservation planner and the availability
store: a service is chosen, a start date is picked on the calendar, a time
is confirmed, and the reservation is committed to availability. The
resulting ``BookingRequest`` is what the booking-submission backend receives;
this module performs no I/O of its own besides the store commit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as _date
from typing import Any, Dict, List, Optional

from pendulum import Date

from ..domain.calendar_navigator import CalendarNavigator
from ..domain.dates import parse_date_key
from ..domain.exceptions import ValidationConflict
from ..domain.models import Conflict, ConflictReason, ReservationPlan, Service
from ..domain.reservation_planner import ReservationPlanner
from ..domain.status import BookingStatus
from .availability_store import AvailabilityStore


@dataclass(frozen=True)
class Customer:
    name: str
    whatsapp: str = ""
    address: str = ""


@dataclass(frozen=True)
class BookingRequest:
    """Finalized booking handed to the booking-submission backend."""
    service: Service
    date: str
    end_date: str
    time: str
    customer: Customer
    status: BookingStatus = BookingStatus.CONFIRMED

    def to_payload(self) -> Dict[str, Any]:
        return {
            "serviceId": self.service.id,
            "date": self.date,
            "endDate": self.end_date,
            "time": self.time,
            "fullname": self.customer.name,
            "whatsapp": self.customer.whatsapp,
            "address": self.customer.address,
            "status": self.status.value,
        }


class BookingFlow:
    """
    One customer's path from service choice to committed reservation.

    Validation and the in-memory commit happen in one synchronous call, so
    no other booking operation can slip in between them.
    """

    def __init__(self, store: AvailabilityStore, planner: ReservationPlanner) -> None:
        self._store = store
        self._planner = planner
        self.service: Optional[Service] = None
        self.plan: Optional[ReservationPlan] = None
        self.last_conflict: Optional[Conflict] = None
        self._pending: Optional[BookingRequest] = None

    def choose_service(self, service: Service) -> None:
        """Start over with ``service``; any unconfirmed reservation is dropped."""
        self.cancel()
        self.service = service

    def select_date(self, day: _date) -> ReservationPlan:
        """
        Plan a reservation starting on ``day``.

        Raises:
            ValueError: If no service has been chosen
            ValidationConflict: If any day of the range is fully booked
        """
        if self.service is None:
            raise ValueError("Choose a service before selecting a date")

        plan = self._planner.plan(self.service, day)
        blocked = self._planner.first_blocked_date(plan, self._store.draft)

        if blocked is not None:
            self.last_conflict = Conflict(reason=ConflictReason.FULLY_BOOKED, date=blocked)
            raise ValidationConflict(self.last_conflict)

        self.plan = plan
        self.last_conflict = None
        return plan

    def available_times(self) -> List[str]:
        if self.plan is None:
            return []
        return self._planner.available_times(self._planner_start(), self._store.draft)

    def navigator(self, today: _date | None = None) -> CalendarNavigator:
        """Calendar whose selections are handed to ``select_date``."""
        selected = self._planner_start() if self.plan is not None else None
        return CalendarNavigator(
            selected_date=selected,
            fully_booked_dates=self._store.draft.fully_booked_dates,
            on_select=self._on_date_selected,
            today=today,
        )

    def _on_date_selected(self, day: Date) -> None:
        try:
            self.select_date(day)
        except ValidationConflict:
            self.plan = None

    def _planner_start(self) -> Date:
        return parse_date_key(self.plan.start_key)

    async def confirm(self, time_slot: str, customer: Customer) -> BookingRequest:
        """
        Reserve ``time_slot`` on the planned dates and persist availability.

        Calling again after a failed commit with the same time retries the
        commit of the already-staged reservation.

        Raises:
            ValueError: If no date is planned, or a different reservation is pending
            ValidationConflict: If the slot or a day of the range is taken
            PersistenceFailure: If availability could not be saved
        """
        if self.plan is None:
            raise ValueError("Select a date before confirming a time")

        if self._pending is not None:
            if self._pending.time != time_slot:
                raise ValueError("Another reservation is waiting to be saved; cancel it first")
            return await self._persist(self._pending)

        confirmed, updated = self._planner.reserve(self.plan, time_slot, self._store.draft)
        self._store.stage(updated)

        request = BookingRequest(
            service=confirmed.service,
            date=confirmed.start_key,
            end_date=confirmed.end_key,
            time=time_slot,
            customer=customer,
        )
        self._pending = request
        return await self._persist(request)

    async def _persist(self, request: BookingRequest) -> BookingRequest:
        await self._store.commit()
        self._pending = None
        self.plan = None
        return request

    def cancel(self) -> None:
        """Abandon the flow, removing any reservation not yet saved."""
        if self._pending is not None:
            self._store.discard_changes()
            self._pending = None
        self.plan = None
        self.last_conflict = None
