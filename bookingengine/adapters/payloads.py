"""
Typed payloads exchanged with the backend.

Responses are parsed exactly once, here, into domain objects. Missing
availability lists default to empty lists; malformed service durations fall
back to 60 minutes / 1 day with a printed warning. Service or booking rows
that cannot be read at all are skipped with a warning.
"""

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from rich.console import Console

from ..domain.dates import date_from_upstream, format_date_key, parse_date_key, parse_time_slot, split_slot_key
from ..domain.exceptions import ConfigurationError
from ..domain.models import AvailabilitySnapshot, Booking, Service
from ..domain.status import status_from_upstream

console = Console()

DEFAULT_DURATION_MINUTES = 60
DEFAULT_DURATION_DAYS = 1


class AvailabilityPayload(BaseModel):
    """``{fullyBookedDates: string[], bookedSlots: string[]}``"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    fully_booked_dates: List[str] = Field(default_factory=list, alias="fullyBookedDates")
    booked_slots: List[str] = Field(default_factory=list, alias="bookedSlots")

    @field_validator("fully_booked_dates", "booked_slots", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("fully_booked_dates")
    @classmethod
    def validate_date_keys(cls, value: List[str]) -> List[str]:
        for key in value:
            parse_date_key(key)
        return value

    @field_validator("booked_slots")
    @classmethod
    def validate_slot_keys(cls, value: List[str]) -> List[str]:
        for key in value:
            split_slot_key(key)
        return value

    @classmethod
    def from_snapshot(cls, snapshot: AvailabilitySnapshot) -> "AvailabilityPayload":
        return cls(
            fully_booked_dates=snapshot.sorted_fully_booked(),
            booked_slots=snapshot.sorted_booked_slots(),
        )

    def to_snapshot(self) -> AvailabilitySnapshot:
        return AvailabilitySnapshot.from_keys(self.fully_booked_dates, self.booked_slots)

    def to_wire(self) -> Dict[str, List[str]]:
        return self.model_dump(by_alias=True)


def parse_positive_int(value: Any, field_name: str) -> int:
    """
    Interpret an upstream duration field.

    Raises:
        ConfigurationError: If the value is missing, non-numeric or not positive
    """
    if value is None or isinstance(value, bool):
        raise ConfigurationError(f"{field_name} is missing")

    try:
        number = int(float(value))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{field_name} is not a number: {value!r}") from exc

    if number <= 0:
        raise ConfigurationError(f"{field_name} must be positive, got {number}")

    return number


class ServiceRow(BaseModel):
    """One entry of the service-list response."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    category: Optional[str] = None
    duration: Any = None
    duration_hour: Any = None
    duration_minute: Any = None
    duration_days: Any = None

    def _duration_minutes(self) -> int:
        if self.duration is not None:
            return parse_positive_int(self.duration, "duration")

        if self.duration_hour is None and self.duration_minute is None:
            raise ConfigurationError("duration is missing")

        hours = int(float(self.duration_hour or 0))
        minutes = int(float(self.duration_minute or 0))
        return parse_positive_int(hours * 60 + minutes, "duration_hour/duration_minute")

    def to_service(self) -> Service:
        """Build a ``Service``, defaulting malformed durations instead of failing."""
        try:
            duration_minutes = self._duration_minutes()
        except (ConfigurationError, TypeError, ValueError) as exc:
            console.print(
                f"[yellow]Warning: Service '{self.name}': {exc}; "
                f"using {DEFAULT_DURATION_MINUTES} minutes[/yellow]"
            )
            duration_minutes = DEFAULT_DURATION_MINUTES

        if self.duration_days is None:
            duration_days = DEFAULT_DURATION_DAYS
        else:
            try:
                duration_days = parse_positive_int(self.duration_days, "duration_days")
            except ConfigurationError as exc:
                console.print(
                    f"[yellow]Warning: Service '{self.name}': {exc}; "
                    f"using {DEFAULT_DURATION_DAYS} day[/yellow]"
                )
                duration_days = DEFAULT_DURATION_DAYS

        return Service(
            id=self.id,
            name=self.name,
            duration_minutes=duration_minutes,
            duration_days=duration_days,
            category=self.category or "",
        )


def _context_timezone(info: ValidationInfo) -> Optional[str]:
    return (info.context or {}).get("timezone")


class BookingRow(BaseModel):
    """
    One entry of the booking-list response.

    Dates may arrive as DateKeys or as timestamps; timestamps are read in the
    ``timezone`` passed through the validation context (default: local).
    """
    model_config = ConfigDict(extra="ignore")

    apply_id: int
    service: str
    schedule_date: str
    schedule_time: str
    status: Optional[str] = None
    technician_name: Optional[str] = None
    customer_name: str = ""
    schedule_end_date: Optional[str] = None

    @field_validator("schedule_date")
    @classmethod
    def validate_date(cls, value: str, info: ValidationInfo) -> str:
        return format_date_key(date_from_upstream(value, _context_timezone(info)))

    @field_validator("schedule_end_date")
    @classmethod
    def validate_end_date(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if not value:
            return None
        return format_date_key(date_from_upstream(value, _context_timezone(info)))

    @field_validator("schedule_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        # "10:00:00" carries seconds; the slot is the leading HH:MM
        parse_time_slot(value[:5])
        return value[:5]

    def to_booking(self, services: Mapping[str, Service]) -> Booking:
        """
        Build a ``Booking``.

        Without an explicit end date, the end follows from the service's
        duration in days.
        """
        start = parse_date_key(self.schedule_date)

        if self.schedule_end_date:
            end = parse_date_key(self.schedule_end_date)
        else:
            service = services.get(self.service)
            days = service.duration_days if service else DEFAULT_DURATION_DAYS
            end = start.add(days=days - 1)

        return Booking(
            id=self.apply_id,
            service=self.service,
            start_date=start,
            end_date=end,
            time=self.schedule_time,
            technician=self.technician_name or None,
            status=status_from_upstream(self.status),
            customer_name=self.customer_name,
        )


def _rows(payload: Any) -> List[Any]:
    """The ``data`` list of an envelope, or an empty list."""
    if isinstance(payload, dict):
        data = payload.get("data")
        return data if isinstance(data, list) else []
    return payload if isinstance(payload, list) else []


def parse_services(payload: Any) -> List[Service]:
    """Parse the service list, skipping rows that cannot be read."""
    services: List[Service] = []

    for row in _rows(payload):
        try:
            services.append(ServiceRow.model_validate(row).to_service())
        except (ValidationError, ValueError) as e:
            console.print(f"[yellow]Warning: Could not parse service row: {e}[/yellow]")
            continue

    return services


def parse_bookings(
    payload: Any,
    services: Mapping[str, Service],
    timezone: Optional[str] = None,
) -> List[Booking]:
    """
    Parse the booking list, skipping rows that cannot be read.

    Args:
        payload: ``{data: [...]}`` envelope or a bare list
        services: Services keyed by name, used for multi-day end dates
        timezone: Zone used to read timestamped dates (default: local)
    """
    bookings: List[Booking] = []

    for row in _rows(payload):
        try:
            parsed = BookingRow.model_validate(row, context={"timezone": timezone})
            bookings.append(parsed.to_booking(services))
        except (ValidationError, ValueError) as e:
            console.print(f"[yellow]Warning: Could not parse booking row: {e}[/yellow]")
            continue

    return bookings


def index_services(services: List[Service]) -> Dict[str, Service]:
    """Services keyed by name, the reference bookings use."""
    return {service.name: service for service in services}
