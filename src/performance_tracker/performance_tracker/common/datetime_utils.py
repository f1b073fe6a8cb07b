from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


def load_timezone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {name!r}")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date (expected YYYY-MM-DD)", context={"value": value})


def parse_iso_datetime(value: str, *, on_date: Optional[date] = None) -> datetime:
    """Parse an ISO timestamp, or a bare HH:MM[:SS] combined with ``on_date``.

    Aware timestamps are rejected: all stored times are naive wall-clock
    values in the organization's timezone.
    """

    v = (value or "").strip()
    if on_date is not None and len(v) <= 8 and ":" in v:
        for fmt in ("%H:%M", "%H:%M:%S"):
            try:
                return datetime.combine(on_date, datetime.strptime(v, fmt).time())
            except ValueError:
                continue
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError("Invalid timestamp", context={"value": value})
    if parsed.tzinfo is not None:
        raise ValidationError("Timestamps must not carry a UTC offset", context={"value": value})
    return parsed


def now_local(tz: tzinfo) -> datetime:
    """Current wall-clock time in ``tz``, returned naive.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz).replace(tzinfo=None)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def window_ending(end: date, days: int) -> tuple[date, date]:
    """Inclusive (start, end) of a ``days``-long window ending on ``end``."""
    return end - timedelta(days=days - 1), end


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """``YYYY-MM-DDTHH:MM:SS`` or None."""
    return value.isoformat(timespec="seconds") if value else None
