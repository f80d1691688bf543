from crew_timesheet.backend.parsers import (
    canonical_time,
    compact_time,
    elapsed_hours,
    to_12_hour,
    to_24_hour,
)
from crew_timesheet.backend.utils import compact_hours, format_hours, parse_hours


def test_to_24_hour_basic():
    assert to_24_hour("08:00 AM") == "08:00"
    assert to_24_hour("4:15 pm") == "16:15"
    assert to_24_hour("12:30 AM") == "00:30"
    assert to_24_hour("12:00 PM") == "12:00"
    assert to_24_hour("  8 am ") == "08:00"


def test_to_24_hour_without_meridiem_keeps_hour():
    assert to_24_hour("14:30") == "14:30"
    assert to_24_hour("7") == "07:00"


def test_to_24_hour_malformed_is_empty():
    assert to_24_hour("") == ""
    assert to_24_hour(None) == ""
    assert to_24_hour("noon") == ""


def test_to_12_hour():
    assert to_12_hour("00:05") == "12:05 AM"
    assert to_12_hour("8:00") == "08:00 AM"
    assert to_12_hour("12:00") == "12:00 PM"
    assert to_12_hour("16:15") == "04:15 PM"
    assert to_12_hour("23:59") == "11:59 PM"


def test_to_12_hour_malformed_is_empty():
    assert to_12_hour("0800") == ""
    assert to_12_hour("ab:cd") == ""
    assert to_12_hour("24:00") == ""
    assert to_12_hour("") == ""


def test_round_trip_through_24_hour_form_is_stable():
    for t in ["08:00 AM", "12:00 AM", "12:45 PM", "4:15 pm", "11 pm", "9:05 am"]:
        once = to_24_hour(t)
        assert to_24_hour(to_12_hour(once)) == once


def test_elapsed_hours_rounds_to_quarter():
    assert elapsed_hours("08:00", "16:00") == "8.00"
    assert elapsed_hours("07:45", "15:10") == "7.50"
    assert elapsed_hours("10:00", "18:15") == "8.25"
    # 7 minutes is under half a quarter, 8 minutes rounds up
    assert elapsed_hours("09:00", "09:07") == "0.00"
    assert elapsed_hours("09:00", "09:08") == "0.25"


def test_elapsed_hours_nearest_quarter_boundaries():
    assert elapsed_hours("09:00", "09:22") == "0.25"
    assert elapsed_hours("09:00", "09:23") == "0.50"


def test_elapsed_hours_is_multiple_of_quarter():
    for end_minute in range(1, 600, 7):
        end = f"{8 + end_minute // 60:02d}:{end_minute % 60:02d}"
        value = float(elapsed_hours("08:00", end))
        assert abs(value * 4 - round(value * 4)) < 1e-9


def test_elapsed_hours_rejects_equal_or_inverted_ranges():
    assert elapsed_hours("09:00", "09:00") == ""
    assert elapsed_hours("10:00", "09:00") == ""
    assert elapsed_hours("22:00", "06:00") == ""
    assert elapsed_hours("", "09:00") == ""
    assert elapsed_hours("9am", "10:00") == ""


def test_canonical_and_compact_times():
    assert canonical_time("8 am") == "08:00 AM"
    assert canonical_time("garbage") == ""
    assert compact_time("08:00 AM") == "8am"
    assert compact_time("01:15 PM") == "1:15pm"
    assert compact_time("12:00 PM") == "12pm"
    assert compact_time("") == ""


def test_hours_formatting():
    assert format_hours(4) == "4.00"
    assert format_hours(None) == ""
    assert compact_hours(4.0) == "4"
    assert compact_hours(7.5) == "7.5"
    assert compact_hours(8.25) == "8.25"


def test_to_24_hour_out_of_range_is_empty():
    assert to_24_hour("13:00 PM") == ""
    assert to_24_hour("0:30 am") == ""
    assert to_24_hour("8:75 am") == ""
    assert to_24_hour("25:00") == ""
    assert canonical_time("13:00 PM") == ""


def test_parse_hours_rejects_non_numbers():
    assert parse_hours("4.25") == 4.25
    assert parse_hours(" ") is None
    assert parse_hours("abc") is None
    for token in ("NaN", "nan", "inf", "-Infinity", float("nan"), float("inf")):
        assert parse_hours(token) is None
