from datetime import datetime, timedelta, timezone

from clippings_assistant.parsing import normalize_date

FIXED_NOW = datetime(2030, 6, 15, 8, 30, 0)


def fixed_clock():
    return FIXED_NOW


def test_device_format_with_weekday_and_meridiem():
    assert normalize_date("Tuesday, April 1, 2025 4:47:55 PM", clock=fixed_clock) == datetime(2025, 4, 1, 16, 47, 55)


def test_noon_and_afternoon_are_distinguished():
    assert normalize_date("Monday, January 1, 2024 12:00:00 PM", clock=fixed_clock) == datetime(2024, 1, 1, 12, 0, 0)
    assert normalize_date("Monday, January 1, 2024 1:00:00 PM", clock=fixed_clock) == datetime(2024, 1, 1, 13, 0, 0)
    assert normalize_date("Monday, January 1, 2024 12:30:00 AM", clock=fixed_clock) == datetime(2024, 1, 1, 0, 30, 0)


def test_day_first_device_format():
    assert normalize_date("Monday, 1 January 2024 12:00:00", clock=fixed_clock) == datetime(2024, 1, 1, 12, 0, 0)


def test_iso_format():
    assert normalize_date("2024-03-05T10:20:30", clock=fixed_clock) == datetime(2024, 3, 5, 10, 20, 30)


def test_rfc_2822_format_keeps_timezone():
    parsed = normalize_date("Fri, 08 Mar 2024 09:15:00 +0100", clock=fixed_clock)
    assert parsed == datetime(2024, 3, 8, 9, 15, 0, tzinfo=timezone(timedelta(hours=1)))


def test_unparseable_dates_fall_back_to_clock():
    assert normalize_date("not a date", clock=fixed_clock) == FIXED_NOW
    assert normalize_date("", clock=fixed_clock) == FIXED_NOW
    assert normalize_date("Lundi 1 janvier 2024", clock=fixed_clock) == FIXED_NOW


def test_older_firmware_comma_after_year_without_seconds():
    parsed = normalize_date("Tuesday, December 25, 2012, 04:48 PM", clock=fixed_clock)
    assert parsed == datetime(2012, 12, 25, 16, 48)


def test_time_without_seconds():
    assert normalize_date("Monday, January 1, 2024 12:00 PM", clock=fixed_clock) == datetime(2024, 1, 1, 12, 0)
    assert normalize_date("January 1, 2024 18:05", clock=fixed_clock) == datetime(2024, 1, 1, 18, 5)


def test_abbreviated_month_names():
    assert normalize_date("Jan 1, 2024", clock=fixed_clock) == datetime(2024, 1, 1)
    assert normalize_date("Sunday, Mar 3, 2024 9:05 AM", clock=fixed_clock) == datetime(2024, 3, 3, 9, 5)
