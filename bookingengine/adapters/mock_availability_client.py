"""
File-backed availability client for running without a backend.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

from ..domain.exceptions import PersistenceFailure
from ..domain.models import AvailabilitySnapshot, Booking, Service, Technician
from .payloads import AvailabilityPayload, index_services, parse_bookings, parse_services

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_data.json"


class MockAvailabilityClient:
    """
    Mock client that serves the backend endpoints from JSON.

    Catalog, bookings and the initial availability come from
    ``mock_data.json``. Committed availability is kept in memory, or written
    to ``state_file`` when one is given so that changes survive between
    CLI invocations.
    """

    def __init__(self, data_file: Path | None = None, state_file: Path | None = None):
        """
        Initialize the mock client.

        Args:
            data_file: JSON document with ``availability``, ``services`` and ``bookings``
            state_file: Optional path where committed availability is stored
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.state_file = state_file
        self._data = self._load_data()
        self._availability: Dict[str, Any] = dict(self._data.get("availability") or {})

    def _load_data(self) -> Dict[str, Any]:
        """Load mock data from the JSON file."""
        if not self.data_file.exists():
            # Fallback to empty if file doesn't exist
            return {}

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceFailure(f"Could not read mock data {self.data_file}: {e}") from e

        return data if isinstance(data, dict) else {}

    async def get_availability(self) -> AvailabilitySnapshot:
        raw = self._availability

        if self.state_file is not None and self.state_file.exists():
            try:
                raw = json.loads(self.state_file.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise PersistenceFailure(f"Could not read {self.state_file}: {e}") from e

        try:
            return AvailabilityPayload.model_validate(raw or {}).to_snapshot()
        except ValidationError as e:
            raise PersistenceFailure(f"Malformed availability payload: {e}") from e

    async def put_availability(self, snapshot: AvailabilitySnapshot) -> None:
        payload = AvailabilityPayload.from_snapshot(snapshot).to_wire()

        if self.state_file is not None:
            try:
                self.state_file.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            except OSError as e:
                raise PersistenceFailure(f"Could not write {self.state_file}: {e}") from e

        self._availability = payload

    def get_services(self) -> List[Service]:
        return parse_services(self._data.get("services"))

    def get_bookings(self, services: List[Service] | None = None, timezone: str | None = None) -> List[Booking]:
        catalog = services if services is not None else self.get_services()
        return parse_bookings(self._data.get("bookings"), index_services(catalog), timezone)

    def get_technicians(self) -> List[Technician]:
        return [
            Technician(id=int(entry["id"]), name=str(entry["name"]))
            for entry in self._data.get("technicians", [])
        ]
