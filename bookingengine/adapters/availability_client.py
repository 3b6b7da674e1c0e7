"""
HTTP client for the availability persistence backend.
"""

import asyncio
from typing import Any, Dict, List

import requests
from pydantic import ValidationError

from ..domain.exceptions import PersistenceFailure
from ..domain.models import AvailabilitySnapshot, Booking, Service
from .payloads import AvailabilityPayload, index_services, parse_bookings, parse_services


class AvailabilityClient:
    """
    Client for the booking backend.

    Availability is read with ``GET /availability`` and replaced as a whole
    with ``PUT /availability``. Blocking ``requests`` calls run in a worker
    thread so the store can await them.
    """

    AVAILABILITY_PATH = "/availability"
    SERVICES_PATH = "/admin/service-list"
    BOOKINGS_PATH = "/admin/user-booking-list"

    def __init__(self, base_url: str, timeout: float = 30, session: requests.Session | None = None):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. ``https://api.example.com/api/v1``
            timeout: Per-request timeout in seconds
            session: Optional preconfigured session (auth cookies, retries)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}

    async def get_availability(self) -> AvailabilitySnapshot:
        """
        Fetch the committed availability.

        Raises:
            PersistenceFailure: If the request fails or the payload is malformed
        """
        data = await asyncio.to_thread(self._get_json, self.AVAILABILITY_PATH)

        try:
            return AvailabilityPayload.model_validate(data or {}).to_snapshot()
        except ValidationError as e:
            raise PersistenceFailure(f"Malformed availability payload: {e}") from e

    async def put_availability(self, snapshot: AvailabilitySnapshot) -> None:
        """
        Replace the committed availability with ``snapshot``.

        Raises:
            PersistenceFailure: If the request fails
        """
        payload = AvailabilityPayload.from_snapshot(snapshot).to_wire()
        await asyncio.to_thread(self._put_json, self.AVAILABILITY_PATH, payload)

    def get_services(self) -> List[Service]:
        return parse_services(self._get_json(self.SERVICES_PATH))

    def get_bookings(self, services: List[Service] | None = None, timezone: str | None = None) -> List[Booking]:
        catalog = services if services is not None else self.get_services()
        return parse_bookings(self._get_json(self.BOOKINGS_PATH), index_services(catalog), timezone)

    def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            raise PersistenceFailure(f"Failed to fetch {url}: {e}") from e
        except ValueError as e:
            raise PersistenceFailure(f"Invalid JSON from {url}: {e}") from e

    def _put_json(self, path: str, payload: Dict[str, Any]) -> None:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.put(url, headers=self.headers, json=payload, timeout=self.timeout)
            response.raise_for_status()

        except requests.exceptions.RequestException as e:
            raise PersistenceFailure(f"Failed to save availability to {url}: {e}") from e
