"""
Domain-specific exception hierarchy for the booking engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Conflict


class BookingEngineError(Exception):
    """Base class for all application-level errors."""


class ValidationConflict(BookingEngineError):
    """Raised when a reservation collides with existing availability."""

    def __init__(self, conflict: "Conflict"):
        self.conflict = conflict
        super().__init__(conflict.describe())


class PersistenceFailure(BookingEngineError):
    """Raised when availability cannot be loaded from or written to the collaborator."""


class CommitInProgressError(PersistenceFailure):
    """Raised when a commit is requested while another one is still in flight."""


class ConfigurationError(BookingEngineError):
    """Raised when upstream service data is malformed and cannot be used as-is."""


class StoreNotLoadedError(PersistenceFailure):
    """Raised when a commit is requested before committed availability was loaded."""
