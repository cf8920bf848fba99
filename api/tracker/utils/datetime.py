"""Datetime parsing helpers for request parameters and release dates."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone


def utcnow() -> datetime:
    """Return an aware UTC timestamp."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime string into an aware UTC datetime.

    Bare dates map to midnight; naive timestamps are treated as UTC.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    if len(text) == 10:
        parsed = datetime.combine(date.fromisoformat(text), time.min)
    else:
        parsed = datetime.fromisoformat(text)
    return ensure_aware(parsed)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def release_instant(value: date) -> datetime:
    """Return the UTC midnight instant a release date starts at."""
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def date_bounds_for_instants(start: datetime, end: datetime) -> tuple[date, date]:
    """Return the inclusive date range whose midnights fall inside [start, end]."""
    start = ensure_aware(start)
    end = ensure_aware(end)
    first = start.date()
    if release_instant(first) < start:
        first = first + timedelta(days=1)
    return first, end.date()
