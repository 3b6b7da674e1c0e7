"""
Adapters layer - Backend collaborators for availability, services and bookings.
"""

from .availability_client import AvailabilityClient
from .mock_availability_client import MockAvailabilityClient

__all__ = ["AvailabilityClient", "MockAvailabilityClient"]
