"""
Draft/committed availability store.

The store keeps two snapshots: the committed baseline (what the booking flow
sees and what the backend holds) and an editable draft. Edits only touch the
draft; ``commit()`` sends the whole draft to the persistence collaborator and
promotes it to the new baseline once the write succeeded.
"""

from __future__ import annotations

from datetime import date as _date
from typing import Iterable, List, Protocol, Tuple

from rich.console import Console

from ..domain.dates import as_date, format_date_key, slot_key, today
from ..domain.exceptions import CommitInProgressError, StoreNotLoadedError
from ..domain.models import AvailabilitySnapshot

console = Console()

DEFAULT_SEED_FULLY_BOOKED_OFFSETS: Tuple[int, ...] = (5,)
DEFAULT_SEED_BOOKED_SLOTS: Tuple[Tuple[int, str], ...] = ((1, "10:30"),)


class AvailabilityClientProtocol(Protocol):
    """Protocol describing the persistence collaborator used by the store."""

    async def get_availability(self) -> AvailabilitySnapshot:
        """Return the committed availability."""

    async def put_availability(self, snapshot: AvailabilitySnapshot) -> None:
        """Replace the committed availability."""


def build_default_seed(
    fully_booked_offsets: Iterable[int] = DEFAULT_SEED_FULLY_BOOKED_OFFSETS,
    booked_slots: Iterable[Tuple[int, str]] = DEFAULT_SEED_BOOKED_SLOTS,
    reference: _date | None = None,
) -> AvailabilitySnapshot:
    """
    Availability used when the collaborator cannot be reached.

    Offsets are days relative to ``reference`` (default: today).
    """
    base = as_date(reference) if reference is not None else today()

    return AvailabilitySnapshot.from_keys(
        fully_booked_dates=[format_date_key(base.add(days=offset)) for offset in fully_booked_offsets],
        booked_slots=[slot_key(base.add(days=offset), time_slot) for offset, time_slot in booked_slots],
    )


class AvailabilityStore:
    """
    Holds fully-booked dates and booked slots for one editing session.

    Until ``load()`` has resolved the store holds the default seed,
    ``is_loaded`` is False and ``commit()`` is refused.
    """

    def __init__(
        self,
        client: AvailabilityClientProtocol,
        default_seed: AvailabilitySnapshot | None = None,
    ) -> None:
        self._client = client
        self._default_seed = default_seed if default_seed is not None else build_default_seed()
        self._committed = self._default_seed
        self._draft = self._default_seed
        self._loaded = False
        self._committing = False

    @property
    def committed(self) -> AvailabilitySnapshot:
        return self._committed

    @property
    def draft(self) -> AvailabilitySnapshot:
        return self._draft

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def is_committing(self) -> bool:
        return self._committing

    async def load(self) -> AvailabilitySnapshot:
        """
        Load committed availability and reset the draft to it.

        Never raises: any failure of the collaborator degrades to the
        default seed with a warning.
        """
        try:
            snapshot = await self._client.get_availability()
        except Exception as e:
            console.print(
                f"[yellow]Warning: Could not load availability ({e}); using default schedule[/yellow]"
            )
            snapshot = self._default_seed

        self._committed = snapshot
        self._draft = snapshot
        self._loaded = True
        return snapshot

    def toggle_full_day(self, day: _date) -> bool:
        """Block or unblock a whole day in the draft. Returns True if now blocked."""
        key = format_date_key(day)
        dates = set(self._draft.fully_booked_dates)

        if key in dates:
            dates.remove(key)
        else:
            dates.add(key)

        self._draft = AvailabilitySnapshot(frozenset(dates), self._draft.booked_slots)
        return key in dates

    def toggle_slot(self, day: _date, time_slot: str) -> bool:
        """
        Book or free a single slot in the draft. Returns True if now booked.

        Allowed on fully-booked days too; the slot has no visible effect
        there until the day is unblocked.
        """
        key = slot_key(day, time_slot)
        slots = set(self._draft.booked_slots)

        if key in slots:
            slots.remove(key)
        else:
            slots.add(key)

        self._draft = AvailabilitySnapshot(self._draft.fully_booked_dates, frozenset(slots))
        return key in slots

    def remove_blocked_date(self, date_key: str) -> None:
        """Drop a DateKey from the draft's fully-booked dates, if present."""
        self._draft = AvailabilitySnapshot(
            self._draft.fully_booked_dates - {date_key},
            self._draft.booked_slots,
        )

    def blocked_dates(self) -> List[str]:
        """Fully-booked DateKeys of the draft in chronological order."""
        return self._draft.sorted_fully_booked()

    def stage(self, snapshot: AvailabilitySnapshot) -> None:
        """Replace the draft, e.g. with a reservation planner result."""
        self._draft = snapshot

    def discard_changes(self) -> None:
        self._draft = self._committed

    def has_unsaved_changes(self) -> bool:
        return self._draft != self._committed

    async def commit(self) -> AvailabilitySnapshot:
        """
        Persist the draft and make it the committed baseline.

        Raises:
            StoreNotLoadedError: If ``load()`` has not resolved yet; the draft
                would otherwise replace the backend with the default seed
            CommitInProgressError: If another commit has not finished yet
            PersistenceFailure: If the collaborator rejects the write; the
                draft is kept so the commit can be retried
        """
        if not self._loaded:
            raise StoreNotLoadedError("Availability has not been loaded yet")

        if self._committing:
            raise CommitInProgressError("A commit is already in progress")

        pending = self._draft
        self._committing = True
        try:
            await self._client.put_availability(pending)
        finally:
            self._committing = False

        self._committed = pending
        return pending
