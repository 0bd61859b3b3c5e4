# Overview: Display formatting for money, percentages and dates (CLI output and report text).

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from salonflow.time_utils import resolve_timezone


def format_currency(amount: float, currency_code: str = "LKR") -> str:
    """1500 -> 'LKR 1,500.00'"""
    return f"{currency_code} {amount:,.2f}"


def format_percentage(rate: float) -> str:
    """0.45 -> '45%' (whole percent, half rounds up)."""
    whole = Decimal(str(rate * 100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{whole}%"


def format_date(value: date | datetime) -> str:
    """date(2024, 1, 15) -> 'Jan 15, 2024'"""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_datetime(value: datetime, tz_name: str | None = None) -> str:
    """
    datetime(2024, 1, 15, 14, 30) -> 'Jan 15, 2024 at 2:30 PM'

    Naive values are UTC. With tz_name the value is shown in that zone.
    """
    if tz_name:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(resolve_timezone(tz_name))
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{format_date(value)} at {hour}:{value.minute:02d} {meridiem}"
