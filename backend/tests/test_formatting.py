"""Display formatting helpers."""

from datetime import date, datetime, timezone

import pytest

from salonflow.formatting import format_currency, format_date, format_datetime, format_percentage


@pytest.mark.parametrize("amount,expected", [
    (1500, "LKR 1,500.00"),
    (0, "LKR 0.00"),
    (1234567.891, "LKR 1,234,567.89"),
    (-100, "LKR -100.00"),
])
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_currency_other_code():
    assert format_currency(12.5, "USD") == "USD 12.50"


@pytest.mark.parametrize("rate,expected", [
    (0.45, "45%"),
    (0.4, "40%"),
    (1, "100%"),
    (0, "0%"),
    (0.125, "13%"),
])
def test_format_percentage(rate, expected):
    assert format_percentage(rate) == expected


def test_format_date():
    assert format_date(date(2024, 1, 15)) == "Jan 15, 2024"
    assert format_date(datetime(2024, 12, 5, 23, 0)) == "Dec 5, 2024"


@pytest.mark.parametrize("value,expected", [
    (datetime(2024, 1, 15, 14, 30), "Jan 15, 2024 at 2:30 PM"),
    (datetime(2024, 1, 15, 0, 5), "Jan 15, 2024 at 12:05 AM"),
    (datetime(2024, 1, 15, 12, 0), "Jan 15, 2024 at 12:00 PM"),
])
def test_format_datetime(value, expected):
    assert format_datetime(value) == expected


def test_format_datetime_in_zone():
    # 20:00 UTC is 01:30 next day in Colombo
    value = datetime(2024, 1, 15, 20, 0)
    assert format_datetime(value, "Asia/Colombo") == "Jan 16, 2024 at 1:30 AM"
    assert format_datetime(value.replace(tzinfo=timezone.utc), "UTC") == "Jan 15, 2024 at 8:00 PM"
