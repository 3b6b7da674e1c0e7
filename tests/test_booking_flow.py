"""
Tests for the customer booking flow.
"""

import asyncio

import pendulum
import pytest

from bookingengine.domain.exceptions import PersistenceFailure, ValidationConflict
from bookingengine.domain.models import AvailabilitySnapshot, ConflictReason, Service
from bookingengine.domain.reservation_planner import ReservationPlanner
from bookingengine.domain.time_slots import BusinessHours
from bookingengine.services.availability_store import AvailabilityStore
from bookingengine.services.booking_flow import BookingFlow, Customer

REPAIR = Service(id=1, name="AC Repair", duration_minutes=90)
PAINTING = Service(id=5, name="Wall Painting", duration_minutes=480, duration_days=3)

TODAY = pendulum.date(2024, 6, 1)
JUNE_10 = pendulum.date(2024, 6, 10)
CUSTOMER = Customer(name="Joni", whatsapp="0812", address="Jl. Merdeka 1")


class StubAvailabilityClient:
    """In-memory availability backend with switchable write failures."""

    def __init__(self, snapshot=None):
        self.snapshot = snapshot or AvailabilitySnapshot()
        self.fail_put = False
        self.saved = []

    async def get_availability(self):
        return self.snapshot

    async def put_availability(self, snapshot):
        if self.fail_put:
            raise PersistenceFailure("write rejected")
        self.saved.append(snapshot)
        self.snapshot = snapshot


def _flow(snapshot: AvailabilitySnapshot | None = None):
    client = StubAvailabilityClient(snapshot)
    store = AvailabilityStore(client=client, default_seed=AvailabilitySnapshot())
    asyncio.run(store.load())
    return BookingFlow(store=store, planner=ReservationPlanner(BusinessHours())), store, client


class TestSelectDate:
    """Tests for service and date selection."""

    def test_requires_service(self):
        flow, _, _ = _flow()

        with pytest.raises(ValueError):
            flow.select_date(JUNE_10)

    def test_plans_multi_day_range(self):
        flow, _, _ = _flow()
        flow.choose_service(PAINTING)

        plan = flow.select_date(JUNE_10)

        assert plan.dates == ("2024-06-10", "2024-06-11", "2024-06-12")
        assert flow.plan == plan

    def test_blocked_range_reports_earliest_date(self):
        flow, _, _ = _flow(AvailabilitySnapshot.from_keys(["2024-06-12", "2024-06-11"], []))
        flow.choose_service(PAINTING)

        with pytest.raises(ValidationConflict) as exc_info:
            flow.select_date(JUNE_10)

        assert exc_info.value.conflict.date == "2024-06-11"
        assert flow.last_conflict.reason is ConflictReason.FULLY_BOOKED
        assert flow.plan is None

    def test_available_times_follow_draft(self):
        flow, _, _ = _flow(AvailabilitySnapshot.from_keys([], ["2024-06-10-09:00"]))
        flow.choose_service(REPAIR)

        assert flow.available_times() == []

        flow.select_date(JUNE_10)

        assert "09:00" not in flow.available_times()
        assert "09:30" in flow.available_times()


class TestConfirm:
    """Tests for confirming a reservation."""

    def test_single_day_reservation(self):
        flow, store, client = _flow()
        flow.choose_service(REPAIR)
        flow.select_date(JUNE_10)

        request = asyncio.run(flow.confirm("10:00", CUSTOMER))

        assert request.date == request.end_date == "2024-06-10"
        assert request.time == "10:00"
        assert store.committed.booked_slots == {"2024-06-10-10:00"}
        assert store.committed.fully_booked_dates == frozenset()
        assert len(client.saved) == 1
        assert flow.plan is None

    def test_multi_day_reservation_blocks_range(self):
        flow, store, _ = _flow()
        flow.choose_service(PAINTING)
        flow.select_date(JUNE_10)

        request = asyncio.run(flow.confirm("09:00", CUSTOMER))

        assert request.end_date == "2024-06-12"
        assert store.committed.fully_booked_dates == {"2024-06-10", "2024-06-11", "2024-06-12"}
        assert store.committed.booked_slots == {"2024-06-10-09:00"}

    def test_requires_planned_date(self):
        flow, _, _ = _flow()
        flow.choose_service(REPAIR)

        with pytest.raises(ValueError):
            asyncio.run(flow.confirm("10:00", CUSTOMER))

    def test_booked_slot_conflict_leaves_store_untouched(self):
        taken = AvailabilitySnapshot.from_keys([], ["2024-06-10-10:00"])
        flow, store, client = _flow(taken)
        flow.choose_service(REPAIR)
        flow.select_date(JUNE_10)

        with pytest.raises(ValidationConflict) as exc_info:
            asyncio.run(flow.confirm("10:00", CUSTOMER))

        assert exc_info.value.conflict.reason is ConflictReason.SLOT_BOOKED
        assert store.draft == taken
        assert client.saved == []

    def test_failed_save_can_be_retried(self):
        flow, store, client = _flow()
        flow.choose_service(REPAIR)
        flow.select_date(JUNE_10)
        client.fail_put = True

        with pytest.raises(PersistenceFailure):
            asyncio.run(flow.confirm("10:00", CUSTOMER))

        assert store.has_unsaved_changes()

        with pytest.raises(ValueError):
            asyncio.run(flow.confirm("11:00", CUSTOMER))

        client.fail_put = False
        request = asyncio.run(flow.confirm("10:00", CUSTOMER))

        assert request.time == "10:00"
        assert store.committed.booked_slots == {"2024-06-10-10:00"}
        assert not store.has_unsaved_changes()

    def test_cancel_discards_unsaved_reservation(self):
        flow, store, client = _flow()
        flow.choose_service(REPAIR)
        flow.select_date(JUNE_10)
        client.fail_put = True

        with pytest.raises(PersistenceFailure):
            asyncio.run(flow.confirm("10:00", CUSTOMER))

        flow.cancel()

        assert not store.has_unsaved_changes()
        assert flow.plan is None

    def test_request_payload(self):
        flow, _, _ = _flow()
        flow.choose_service(PAINTING)
        flow.select_date(JUNE_10)

        payload = asyncio.run(flow.confirm("09:00", CUSTOMER)).to_payload()

        assert payload == {
            "serviceId": 5,
            "date": "2024-06-10",
            "endDate": "2024-06-12",
            "time": "09:00",
            "fullname": "Joni",
            "whatsapp": "0812",
            "address": "Jl. Merdeka 1",
            "status": "Confirmed",
        }


class TestNavigator:
    """Tests for the calendar handed out by the flow."""

    def test_click_plans_reservation(self):
        flow, _, _ = _flow()
        flow.choose_service(PAINTING)
        navigator = flow.navigator(today=TODAY)

        navigator.click(JUNE_10)

        assert flow.plan.start_key == "2024-06-10"

    def test_click_on_blocked_range_clears_plan(self):
        flow, _, _ = _flow(AvailabilitySnapshot.from_keys(["2024-06-11"], []))
        flow.choose_service(PAINTING)
        navigator = flow.navigator(today=TODAY)

        navigator.click(pendulum.date(2024, 6, 12))
        assert flow.plan is not None

        navigator.click(JUNE_10)

        assert flow.plan is None
        assert flow.last_conflict.date == "2024-06-11"
        assert navigator.is_fully_booked(pendulum.date(2024, 6, 11))
