"""
Keyboard-driven focus and selection state for a month calendar.

The navigator owns a focused date (the keyboard cursor) and an optional
selected date. The visible month always follows the focused date, and the
date control that should hold input focus is always the focused one.
"""

from dataclasses import dataclass
from datetime import date as _date
from enum import Enum
from typing import Callable, Iterable, List, Optional

import pendulum
from pendulum import Date

from .dates import as_date, format_date_key, today as local_today

DateCallback = Callable[[Date], None]

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


class NavigationKey(str, Enum):
    ARROW_RIGHT = "ArrowRight"
    ARROW_LEFT = "ArrowLeft"
    ARROW_UP = "ArrowUp"
    ARROW_DOWN = "ArrowDown"
    PAGE_UP = "PageUp"
    PAGE_DOWN = "PageDown"
    HOME = "Home"
    END = "End"
    ENTER = "Enter"
    SPACE = " "


def sunday_weekday(value: _date) -> int:
    """Column of ``value`` in a Sunday-first week (Sunday=0 ... Saturday=6)."""
    return value.isoweekday() % 7


def shift_months(value: _date, months: int) -> Date:
    """Move by whole months keeping the day of month, clamped to the month's end."""
    return as_date(value).add(months=months)


@dataclass(frozen=True)
class DayCell:
    """Presentation state of one day in the grid."""
    date: Date
    key: str
    is_today: bool
    is_selected: bool
    is_past: bool
    is_fully_booked: bool
    is_focused: bool

    @property
    def is_disabled(self) -> bool:
        # Fully-booked days stay clickable so administrators can open them
        return self.is_past

    @property
    def tab_index(self) -> int:
        return 0 if self.is_focused else -1


class CalendarNavigator:
    """
    Focus/selection state machine over a Sunday-first calendar grid.

    Args:
        selected_date: Date already chosen, if any; it also receives initial focus
        fully_booked_dates: DateKeys that cannot be selected from the keyboard
        on_select: Called with the date whenever a selection is made
        on_focus: Called with the date whenever focus moves to another day
        today: Reference day; defaults to the local calendar day
    """

    def __init__(
        self,
        selected_date: Optional[_date] = None,
        fully_booked_dates: Iterable[str] = (),
        on_select: Optional[DateCallback] = None,
        on_focus: Optional[DateCallback] = None,
        today: Optional[_date] = None,
    ):
        self._today = as_date(today) if today is not None else local_today()
        self.selected_date: Optional[Date] = as_date(selected_date) if selected_date is not None else None
        self.focused_date: Date = self.selected_date or self._today
        self._fully_booked = frozenset(fully_booked_dates)
        self._on_select = on_select
        self._on_focus = on_focus

    @property
    def today(self) -> Date:
        return self._today

    @property
    def visible_month(self) -> Date:
        """First day of the month containing the focused date."""
        return pendulum.date(self.focused_date.year, self.focused_date.month, 1)

    @property
    def focus_key(self) -> str:
        """DateKey of the date control that should hold input focus."""
        return format_date_key(self.focused_date)

    def month_label(self) -> str:
        return self.visible_month.format("MMMM YYYY")

    def set_fully_booked_dates(self, keys: Iterable[str]) -> None:
        self._fully_booked = frozenset(keys)

    def is_fully_booked(self, value: _date) -> bool:
        return format_date_key(value) in self._fully_booked

    def is_past(self, value: _date) -> bool:
        return as_date(value) < self._today

    def can_select(self, value: _date) -> bool:
        return not self.is_past(value) and not self.is_fully_booked(value)

    def handle_key(self, key: str, shift: bool = False) -> bool:
        """
        Apply one key press.

        Returns True if the key was recognised. Enter/Space on a past or
        fully-booked day is recognised but changes nothing.
        """
        try:
            nav_key = NavigationKey(key)
        except ValueError:
            return False

        current = self.focused_date

        if nav_key is NavigationKey.ARROW_RIGHT:
            target = current.add(days=1)
        elif nav_key is NavigationKey.ARROW_LEFT:
            target = current.subtract(days=1)
        elif nav_key is NavigationKey.ARROW_UP:
            target = current.subtract(days=7)
        elif nav_key is NavigationKey.ARROW_DOWN:
            target = current.add(days=7)
        elif nav_key is NavigationKey.PAGE_UP:
            target = shift_months(current, -12 if shift else -1)
        elif nav_key is NavigationKey.PAGE_DOWN:
            target = shift_months(current, 12 if shift else 1)
        elif nav_key is NavigationKey.HOME:
            target = current.subtract(days=sunday_weekday(current))
        elif nav_key is NavigationKey.END:
            target = current.add(days=6 - sunday_weekday(current))
        else:
            self.select_focused()
            return True

        self.move_focus(target)
        return True

    def move_focus(self, value: _date) -> None:
        target = as_date(value)
        if target == self.focused_date:
            return

        self.focused_date = target
        if self._on_focus is not None:
            self._on_focus(target)

    def select_focused(self) -> bool:
        """Select the focused date if it is selectable; otherwise do nothing."""
        if not self.can_select(self.focused_date):
            return False

        self._select(self.focused_date)
        return True

    def click(self, value: _date) -> bool:
        """Pointer selection: focus and select any day that is not in the past."""
        target = as_date(value)
        if self.is_past(target):
            return False

        self.move_focus(target)
        self._select(target)
        return True

    def previous_month(self) -> None:
        self.move_focus(shift_months(self.focused_date, -1))

    def next_month(self) -> None:
        self.move_focus(shift_months(self.focused_date, 1))

    def _select(self, value: Date) -> None:
        self.selected_date = value
        if self._on_select is not None:
            self._on_select(value)

    def weeks(self) -> List[List[Optional[Date]]]:
        """
        Days of the visible month as Sunday-first weeks.

        Leading and trailing positions outside the month are None so every
        week has exactly seven entries.
        """
        first = self.visible_month
        weeks: List[List[Optional[Date]]] = []
        week: List[Optional[Date]] = [None] * sunday_weekday(first)

        for day in range(1, first.days_in_month + 1):
            if len(week) == 7:
                weeks.append(week)
                week = []
            week.append(pendulum.date(first.year, first.month, day))

        week.extend([None] * (7 - len(week)))
        weeks.append(week)
        return weeks

    def cells(self) -> List[List[Optional[DayCell]]]:
        """The grid from ``weeks()`` with per-day presentation state."""
        return [[self._cell(day) if day is not None else None for day in week] for week in self.weeks()]

    def _cell(self, day: Date) -> DayCell:
        return DayCell(
            date=day,
            key=format_date_key(day),
            is_today=day == self._today,
            is_selected=self.selected_date is not None and day == self.selected_date,
            is_past=self.is_past(day),
            is_fully_booked=self.is_fully_booked(day),
            is_focused=day == self.focused_date,
        )
