"""
Tests for keyboard calendar navigation.
"""

import pendulum
import pytest

from bookingengine.domain.calendar_navigator import CalendarNavigator, shift_months, sunday_weekday

TODAY = pendulum.date(2024, 1, 15)


def _navigator(focus, **kwargs):
    kwargs.setdefault("today", TODAY)
    navigator = CalendarNavigator(**kwargs)
    navigator.move_focus(focus)
    return navigator


class TestMonthShifts:
    """Tests for month arithmetic."""

    @pytest.mark.parametrize(
        "start, months, expected",
        [
            (pendulum.date(2024, 1, 31), 1, pendulum.date(2024, 2, 29)),
            (pendulum.date(2023, 1, 31), 1, pendulum.date(2023, 2, 28)),
            (pendulum.date(2024, 3, 31), -1, pendulum.date(2024, 2, 29)),
            (pendulum.date(2024, 2, 29), 12, pendulum.date(2025, 2, 28)),
            (pendulum.date(2024, 6, 15), 1, pendulum.date(2024, 7, 15)),
        ],
    )
    def test_shift_clamps_to_month_end(self, start, months, expected):
        assert shift_months(start, months) == expected

    def test_sunday_first_weekday(self):
        assert sunday_weekday(pendulum.date(2024, 6, 9)) == 0  # Sunday
        assert sunday_weekday(pendulum.date(2024, 6, 15)) == 6  # Saturday


class TestKeyboard:
    """Tests for handle_key."""

    def test_page_down_from_january_31(self):
        navigator = _navigator(pendulum.date(2024, 1, 31))

        assert navigator.handle_key("PageDown")
        assert navigator.focused_date == pendulum.date(2024, 2, 29)
        assert navigator.visible_month == pendulum.date(2024, 2, 1)

    def test_page_down_in_common_year(self):
        navigator = _navigator(pendulum.date(2023, 1, 31), today=pendulum.date(2023, 1, 1))

        navigator.handle_key("PageDown")

        assert navigator.focused_date == pendulum.date(2023, 2, 28)

    def test_shift_page_up_moves_a_year(self):
        navigator = _navigator(pendulum.date(2024, 2, 29))

        navigator.handle_key("PageUp", shift=True)

        assert navigator.focused_date == pendulum.date(2023, 2, 28)

    @pytest.mark.parametrize(
        "key, expected",
        [
            ("ArrowRight", pendulum.date(2024, 6, 13)),
            ("ArrowLeft", pendulum.date(2024, 6, 11)),
            ("ArrowUp", pendulum.date(2024, 6, 5)),
            ("ArrowDown", pendulum.date(2024, 6, 19)),
            ("Home", pendulum.date(2024, 6, 9)),
            ("End", pendulum.date(2024, 6, 15)),
            ("PageUp", pendulum.date(2024, 5, 12)),
        ],
    )
    def test_movement_keys(self, key, expected):
        navigator = _navigator(pendulum.date(2024, 6, 12))  # Wednesday

        navigator.handle_key(key)

        assert navigator.focused_date == expected
        assert navigator.focus_key == expected.format("YYYY-MM-DD")

    def test_arrow_crosses_into_next_month(self):
        navigator = _navigator(pendulum.date(2024, 1, 31))

        navigator.handle_key("ArrowRight")

        assert navigator.visible_month == pendulum.date(2024, 2, 1)

    def test_unknown_key_is_ignored(self):
        navigator = _navigator(pendulum.date(2024, 6, 12))

        assert navigator.handle_key("a") is False
        assert navigator.focused_date == pendulum.date(2024, 6, 12)

    def test_enter_selects_open_day(self):
        selected = []
        navigator = _navigator(pendulum.date(2024, 6, 12), on_select=selected.append)

        assert navigator.handle_key("Enter")

        assert navigator.selected_date == pendulum.date(2024, 6, 12)
        assert selected == [pendulum.date(2024, 6, 12)]

    def test_space_selects_open_day(self):
        navigator = _navigator(pendulum.date(2024, 6, 12))

        navigator.handle_key(" ")

        assert navigator.selected_date == pendulum.date(2024, 6, 12)

    def test_enter_on_fully_booked_day_does_nothing(self):
        selected = []
        navigator = _navigator(
            pendulum.date(2024, 6, 12),
            fully_booked_dates=["2024-06-12"],
            on_select=selected.append,
        )

        assert navigator.handle_key("Enter")

        assert navigator.selected_date is None
        assert selected == []

    def test_enter_on_past_day_does_nothing(self):
        navigator = _navigator(pendulum.date(2024, 1, 10))

        navigator.handle_key("Enter")

        assert navigator.selected_date is None

    def test_focus_callback_fires_on_move(self):
        focused = []
        navigator = CalendarNavigator(
            selected_date=pendulum.date(2024, 6, 12), on_focus=focused.append, today=TODAY
        )

        navigator.handle_key("ArrowRight")

        assert focused == [pendulum.date(2024, 6, 13)]


class TestSelection:
    """Tests for pointer selection and initial state."""

    def test_initial_focus_follows_selection(self):
        navigator = CalendarNavigator(selected_date=pendulum.date(2024, 6, 12), today=TODAY)

        assert navigator.focused_date == pendulum.date(2024, 6, 12)

    def test_initial_focus_defaults_to_today(self):
        navigator = CalendarNavigator(today=TODAY)

        assert navigator.focused_date == TODAY
        assert navigator.selected_date is None

    def test_today_datetime_is_normalised_to_its_day(self):
        navigator = CalendarNavigator(today=pendulum.datetime(2024, 6, 10, 15, 0))

        navigator.handle_key("Enter")

        assert type(navigator.selected_date) is pendulum.Date
        assert navigator.selected_date == pendulum.date(2024, 6, 10)
        assert not navigator.is_past(pendulum.date(2024, 6, 10))

    def test_click_selects_fully_booked_future_day(self):
        navigator = CalendarNavigator(fully_booked_dates=["2024-06-12"], today=TODAY)

        assert navigator.click(pendulum.date(2024, 6, 12))

        assert navigator.selected_date == pendulum.date(2024, 6, 12)
        assert navigator.focused_date == pendulum.date(2024, 6, 12)

    def test_click_on_past_day_rejected(self):
        navigator = CalendarNavigator(today=TODAY)

        assert not navigator.click(pendulum.date(2024, 1, 14))
        assert navigator.selected_date is None

    def test_month_buttons(self):
        navigator = _navigator(pendulum.date(2024, 3, 31))

        navigator.previous_month()
        assert navigator.focused_date == pendulum.date(2024, 2, 29)

        navigator.next_month()
        assert navigator.focused_date == pendulum.date(2024, 3, 29)

    def test_fully_booked_dates_can_be_replaced(self):
        navigator = CalendarNavigator(today=TODAY)
        navigator.set_fully_booked_dates(["2024-06-12"])

        assert navigator.is_fully_booked(pendulum.date(2024, 6, 12))
        assert not navigator.can_select(pendulum.date(2024, 6, 12))


class TestGrid:
    """Tests for weeks() and cells()."""

    def test_june_2024_grid(self):
        navigator = _navigator(pendulum.date(2024, 6, 12))

        weeks = navigator.weeks()

        assert navigator.month_label() == "June 2024"
        assert len(weeks) == 6
        assert all(len(week) == 7 for week in weeks)
        assert weeks[0][:6] == [None] * 6
        assert weeks[0][6] == pendulum.date(2024, 6, 1)
        assert weeks[-1][0] == pendulum.date(2024, 6, 30)
        assert weeks[-1][1:] == [None] * 6

    def test_single_focusable_cell(self):
        navigator = _navigator(
            pendulum.date(2024, 1, 20),
            fully_booked_dates=["2024-01-22"],
        )

        cells = [cell for week in navigator.cells() for cell in week if cell is not None]
        focusable = [cell for cell in cells if cell.tab_index == 0]

        assert [cell.key for cell in focusable] == ["2024-01-20"]
        assert focusable[0].key == navigator.focus_key

        by_key = {cell.key: cell for cell in cells}
        assert by_key["2024-01-15"].is_today
        assert by_key["2024-01-14"].is_disabled
        assert by_key["2024-01-22"].is_fully_booked
        assert not by_key["2024-01-22"].is_disabled
