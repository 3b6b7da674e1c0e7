"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .calendar_navigator import CalendarNavigator, DayCell, NavigationKey
from .exceptions import (
    BookingEngineError,
    CommitInProgressError,
    ConfigurationError,
    PersistenceFailure,
    StoreNotLoadedError,
    ValidationConflict,
)
from .models import (
    AvailabilitySnapshot,
    Booking,
    Conflict,
    ConflictReason,
    DailyLoad,
    ReservationPlan,
    Service,
    Technician,
    WorkloadLevel,
    WorkloadSegment,
)
from .reservation_planner import ReservationPlanner
from .status import BookingStatus
from .time_slots import BusinessHours, generate_time_slots
from .workload import WorkdayWindow, WorkloadAggregator

__all__ = [
    "AvailabilitySnapshot",
    "Booking",
    "BookingEngineError",
    "BookingStatus",
    "BusinessHours",
    "CalendarNavigator",
    "CommitInProgressError",
    "ConfigurationError",
    "Conflict",
    "ConflictReason",
    "DailyLoad",
    "DayCell",
    "NavigationKey",
    "PersistenceFailure",
    "ReservationPlan",
    "ReservationPlanner",
    "Service",
    "StoreNotLoadedError",
    "Technician",
    "ValidationConflict",
    "WorkdayWindow",
    "WorkloadAggregator",
    "WorkloadLevel",
    "WorkloadSegment",
    "generate_time_slots",
]
