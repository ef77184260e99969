from datetime import date, datetime, timedelta

import pytest

from funnel_processor.cleaning.dates import excel_serial_to_date, parse_date


def test_iso_and_day_first_formats_agree():
    assert parse_date("2024-03-07") == date(2024, 3, 7)
    assert parse_date("07/03/2024") == date(2024, 3, 7)


@pytest.mark.parametrize("value", ["2024-3-7", "7/3/2024", " 2024-03-07 "])
def test_single_digit_parts_and_whitespace(value):
    assert parse_date(value) == date(2024, 3, 7)


def test_excel_serial_number():
    expected = date(1899, 12, 30) + timedelta(days=45000)
    assert expected == date(2023, 3, 15)
    assert parse_date(45000) == expected
    assert parse_date("45000") == expected
    assert parse_date(45000.75) == expected


def test_serial_conversion_is_relative_to_unix_epoch_serial():
    assert excel_serial_to_date(25569) == date(1970, 1, 1)


@pytest.mark.parametrize("value", [15, "30000", 0, "0"])
def test_small_numbers_are_durations_not_dates(value):
    assert parse_date(value) is None


def test_absurd_serial_is_rejected():
    assert parse_date(1e12) is None


def test_datetime_cells_pass_through():
    assert parse_date(datetime(2024, 3, 7, 15, 30)) == date(2024, 3, 7)
    assert parse_date(date(2024, 3, 7)) == date(2024, 3, 7)


def test_free_form_fallback():
    assert parse_date("March 7, 2024") == date(2024, 3, 7)
    assert parse_date("2024-03-07T10:15:00") == date(2024, 3, 7)


@pytest.mark.parametrize("value", [None, "", "not a date", "2024-02-30", True, False])
def test_unparseable_values_return_none(value):
    assert parse_date(value) is None


@pytest.mark.parametrize("value", ["now", "today", "tomorrow", "yesterday", "45_000", "2024_03_07"])
def test_relative_keywords_and_separated_digits_are_not_dates(value):
    assert parse_date(value) is None
