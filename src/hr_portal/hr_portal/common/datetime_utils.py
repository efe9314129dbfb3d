from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from ..core.exceptions import ValidationError


def parse_iso_date(value: Any) -> date:
    """Parse YYYY-MM-DD string into date."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_iso_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp into a naive local datetime.

    Aware values (``Z`` or ``+02:00``) are converted to server-local time,
    which is how every timestamp is stored.
    """

    if value is None:
        raise ValidationError("Timestamp is required")
    if not isinstance(value, str):
        raise ValidationError(f"Invalid timestamp {value!r} (expected ISO-8601 string)")

    raw = value.strip()
    if not raw:
        raise ValidationError("Timestamp is required")
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid timestamp {value!r} (expected ISO-8601)")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_hhmm(value: Any) -> time:
    if not isinstance(value, str):
        raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
