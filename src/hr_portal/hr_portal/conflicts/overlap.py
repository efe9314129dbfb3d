from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Iterator, Mapping, Sequence, Tuple

from .model import Interval

TimeWindow = Tuple[time, time]


def overlaps(a: Interval, b: Interval) -> bool:
    """Half-open overlap test: ``a.start < b.end and b.start < a.end``."""
    return a.start < b.end and b.start < a.end


def align_up(moment: datetime, step_minutes: int) -> datetime:
    """Round ``moment`` up to the next multiple of ``step_minutes`` after midnight."""

    base = moment.replace(second=0, microsecond=0)
    rem = (base.hour * 60 + base.minute) % step_minutes
    if rem == 0 and base == moment:
        return moment
    if rem == 0:
        return base + timedelta(minutes=step_minutes)
    return base + timedelta(minutes=step_minutes - rem)


def iter_slots(start: datetime, until: datetime, *, duration_minutes: int, step_minutes: int) -> Iterator[Interval]:
    cursor = align_up(start, step_minutes)
    step = timedelta(minutes=step_minutes)
    while cursor < until:
        yield Interval.from_duration(cursor, duration_minutes)
        cursor += step


def fits_windows(slot: Interval, windows_by_day: Mapping[int, Sequence[TimeWindow]]) -> bool:
    """True when ``slot`` lies inside one window of its weekday (same calendar day)."""

    if slot.end.date() != slot.start.date():
        return False
    for w_start, w_end in windows_by_day.get(slot.start.weekday(), ()):
        if w_start <= slot.start.time() and slot.end.time() <= w_end:
            return True
    return False
