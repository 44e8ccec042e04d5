"""
Tests for the worked-time summary and the status line.
"""
from datetime import datetime, timedelta, timezone
import pytest
from clockbar.config import PROJECT_ROOT
from clockbar.errors import ClockifyAPIError, ClockifyNetworkError, ConfigValidationError
from clockbar.integrations.clockify_types import TimeEntry
from clockbar.menu import SEPARATOR, format_menu
from clockbar.status import (
    WorkSummary,
    build_error_menu,
    build_menu,
    status_line,
    summarize,
    todays_entries,
)
from clockbar.utils.timefmt import format_instant

NOW = datetime(2024, 5, 6, 15, 0, tzinfo=timezone.utc)


def at(delta):
    return format_instant(NOW - delta)


def entries(entry, *intervals):
    return [
        TimeEntry(**entry(f"e{i}", start, end))
        for i, (start, end) in enumerate(intervals)
    ]


def summary(hours=0, minutes=0, seconds=0, working=False):
    return WorkSummary(is_working=working, worked=timedelta(hours=hours, minutes=minutes, seconds=seconds))


def test_open_and_closed_entries(entry):
    today = entries(
        entry,
        (at(timedelta(hours=2)), at(timedelta(hours=1))),
        (at(timedelta(minutes=30)), None),
    )

    result = summarize(today, NOW)

    assert result.is_working
    assert (result.hours, result.minutes) == (1, 30)
    assert status_line(result) == ("Working: 1h 30m 🟡", "#FFFFFF")


def test_no_entries_is_out_of_office():
    result = summarize([], NOW)

    assert not result.is_working
    assert (result.hours, result.minutes) == (0, 0)
    assert status_line(result) == ("Out of office", "#777777")


def test_closed_entries_only_is_not_working(entry):
    result = summarize(entries(entry, (at(timedelta(hours=5)), at(timedelta(hours=2, minutes=15)))), NOW)

    assert not result.is_working
    assert status_line(result) == ("Not working: 2h 45m", "#777777")


def test_yesterdays_open_entry_is_ignored(entry):
    result = summarize(entries(entry, (at(timedelta(days=1)), None)), NOW)

    assert not result.is_working
    assert result.worked == timedelta()


def test_today_uses_local_date(entry):
    """An entry at 23:30 UTC belongs to the next day two hours east of UTC."""
    cest = timezone(timedelta(hours=2))
    now = datetime(2024, 5, 7, 9, 0, tzinfo=cest)
    late = entries(entry, ("2024-05-06T23:30:00Z", "2024-05-07T00:30:00Z"))

    assert len(todays_entries(late, now)) == 1
    assert todays_entries(late, now.astimezone(timezone.utc)) == []


def test_worked_time_grows_while_open(entry):
    today = entries(entry, (at(timedelta(hours=1)), None))

    earlier = summarize(today, NOW)
    later = summarize(today, NOW + timedelta(minutes=7))

    assert later.worked >= earlier.worked
    assert later.worked - earlier.worked == timedelta(minutes=7)


@pytest.mark.parametrize(
    "result,text",
    [
        (summary(7, 59, working=True), "Working: 7h 59m 🟡"),
        (summary(8, 0, working=True), "Working: 8h 0m 🟢"),
        (summary(9, 5, working=True), "Working: 9h 5m 🟢"),
        (summary(8, 0), "Not working: 8h 0m"),
        (summary(8, 59), "Not working: 8h 59m"),
        (summary(9, 0), "Finished: 9h 0m 🟢"),
        (summary(0, 1), "Not working: 0h 1m"),
        (summary(0, 0, 59), "Out of office"),
    ],
)
def test_status_thresholds(result, text):
    assert status_line(result)[0] == text


def test_menu_while_working():
    menu = build_menu(summary(2, 0, working=True), "https://tracker.test")

    assert menu[1] == SEPARATOR and menu[4] == SEPARATOR
    clock_in, clock_out = menu[2], menu[3]
    assert clock_in.text == "Clock in" and clock_in.disabled
    assert clock_out.text == "Clock out" and not clock_out.disabled
    assert clock_in.params[-1] == "clock-in"
    assert clock_out.refresh
    assert menu[5].href == "https://tracker.test"


def test_menu_output_format():
    output = format_menu(build_menu(summary(), "https://app.clockify.me/tracker"))
    lines = output.splitlines()

    assert lines[0] == "Out of office | color=#777777 dropdown=false"
    assert lines[1] == "---"
    assert "param3=clock-in terminal=false refresh=true" in lines[2]
    assert "disabled=true" not in lines[2]
    assert lines[3].endswith("refresh=true disabled=true")
    assert lines[5] == "Check my time | href=https://app.clockify.me/tracker"


@pytest.mark.parametrize(
    "exc,headline",
    [
        (ConfigValidationError("Missing required environment variables: API_TOKEN", ["API_TOKEN"]),
         "⚠️ Clockify: configuration error"),
        (ClockifyAPIError("unauthorized", "Unauthorized", 401), "⚠️ Clockify: authentication failed"),
        (ClockifyAPIError("upstream_error", "Bad Gateway", 502), "⚠️ Clockify: API error (502)"),
        (ClockifyNetworkError("Network error while fetching time entries"), "⚠️ Clockify: network error"),
        (RuntimeError("boom"), "⚠️ Clockify: unexpected error"),
    ],
)
def test_error_menu(exc, headline):
    menu = build_error_menu(exc, "/home/me/clockbar/.env")

    assert menu[0].text == headline
    assert menu[0].color == "#FF0000"
    assert any(item.text == "Check configuration" and item.params == ["/home/me/clockbar/.env"] for item in menu[1:] if item != SEPARATOR)
    assert menu[-1].text == "Refresh" and menu[-1].refresh


def test_error_menu_without_env_file_points_at_project():
    menu = build_error_menu(ConfigValidationError("Missing required environment variables: API_TOKEN", ["API_TOKEN"]))

    check = next(item for item in menu if item != SEPARATOR and item.text == "Check configuration")
    assert check.params[0] in (str(PROJECT_ROOT / ".env.example"), str(PROJECT_ROOT))
    assert ".xbar-clockify" not in check.params[0]
