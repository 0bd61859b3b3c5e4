from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    # Normalize to UTC-naive
    if dt.tzinfo is None:
        # interpret naive as UTC
        return dt.replace(tzinfo=None)

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def resolve_timezone(name: str) -> ZoneInfo:
    """Look up an IANA zone name; raises ValueError for unknown or non-string names."""
    if not isinstance(name, str):
        raise ValueError(f"Unknown timezone: {name!r}")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {name}")


def parse_calendar_date(value: str | date | None) -> Optional[date]:
    """Accept a date, or a 'YYYY-MM-DD' string."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    s = value.strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")


def local_day_range(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """
    Half-open UTC-naive window [start, next_start) for a local calendar day.

    Queries filter with `>= start` and `< next_start` so stored microseconds
    never fall between two days. DST days are handled by the zone database,
    so the window may be 23 or 25 hours long.
    """
    tz = resolve_timezone(tz_name)
    start_local = datetime.combine(day, time.min, tzinfo=tz)
    next_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    start = start_local.astimezone(timezone.utc).replace(tzinfo=None)
    next_start = next_local.astimezone(timezone.utc).replace(tzinfo=None)
    return start, next_start


def local_day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """
    Display bounds for a local day: local 00:00:00.000 to 23:59:59.999 in UTC.

    For filtering use local_day_range.
    """
    start, next_start = local_day_range(day, tz_name)
    return start, next_start - timedelta(milliseconds=1)


def local_today(tz_name: str) -> date:
    """Today's calendar date in the given zone."""
    return datetime.now(resolve_timezone(tz_name)).date()
