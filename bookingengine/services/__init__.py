"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_store import AvailabilityClientProtocol, AvailabilityStore, build_default_seed
from .booking_flow import BookingFlow, BookingRequest, Customer

__all__ = [
    "AvailabilityClientProtocol",
    "AvailabilityStore",
    "BookingFlow",
    "BookingRequest",
    "Customer",
    "build_default_seed",
]
