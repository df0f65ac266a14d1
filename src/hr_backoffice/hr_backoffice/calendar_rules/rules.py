"""Pure date rules: weekends, holidays, business-day counting, blackout overlap."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from ..common.datetime_utils import iter_days
from .model import BlackoutConflict, BlackoutDate, Holiday


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def is_holiday(day: date, holidays: Iterable[Holiday]) -> bool:
    return any(h.covers(day) for h in holidays)


def count_business_days(
    start: date,
    end: date,
    is_half_day_start: bool,
    is_half_day_end: bool,
    holidays: Sequence[Holiday],
) -> float:
    """Working days in [start, end].

    Weekends and holiday ranges are skipped. The first day counts 0.5 when
    `is_half_day_start`, the last day 0.5 when `is_half_day_end`; a one-day
    request flagged on both ends still counts 0.5.
    """
    total = 0.0
    for day in iter_days(start, end):
        if is_weekend(day) or is_holiday(day, holidays):
            continue
        if day == start and is_half_day_start:
            total += 0.5
        elif day == end and is_half_day_end:
            total += 0.5
        else:
            total += 1.0
    return total


def find_blackout_conflict(start: date, end: date, blackouts: Sequence[BlackoutDate]) -> BlackoutConflict:
    """First blackout (storage order) sharing any calendar day with [start, end]."""
    for blackout in blackouts:
        if blackout.overlaps(start, end):
            return BlackoutConflict(conflict=True, name=blackout.name, date=blackout.date)
    return BlackoutConflict(conflict=False)
