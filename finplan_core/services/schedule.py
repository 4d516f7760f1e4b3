from __future__ import annotations

import datetime as dt
from typing import Iterator, List, Optional

import pandas as pd

from finplan_core.domain.errors import ValidationError
from finplan_core.domain.models import Frequency, Schedule


def add_months(date: dt.date, months: int) -> dt.date:
    """Calendar-month shift; a day missing from the target month clamps to its last day."""
    return (pd.Timestamp(date) + pd.DateOffset(months=months)).date()


def advance(start: dt.date, frequency: Frequency, periods: int) -> dt.date:
    """Date of the ``periods``-th occurrence counted from ``start`` (not from the previous one)."""
    frequency = Frequency(frequency)
    if frequency is Frequency.DAILY:
        return start + dt.timedelta(days=periods)
    if frequency is Frequency.WEEKLY:
        return start + dt.timedelta(days=7 * periods)
    if frequency is Frequency.MONTHLY:
        return add_months(start, periods)
    return (pd.Timestamp(start) + pd.DateOffset(years=periods)).date()


def iter_occurrences(schedule: Schedule, horizon: Optional[int] = None) -> Iterator[dt.date]:
    if horizon is not None and horizon < 0:
        raise ValidationError("horizon must not be negative", field="horizon")
    cap = schedule.horizon_cap if horizon is None else min(horizon, schedule.horizon_cap)
    for k in range(cap):
        current = advance(schedule.start_date, schedule.frequency, k)
        if schedule.end_date is not None and current > schedule.end_date:
            return
        yield current


def occurrences(schedule: Schedule, horizon: Optional[int] = None) -> List[dt.date]:
    """
    Ordered occurrence dates of ``schedule``, at most ``horizon_cap`` of them.
    ``horizon`` can tighten the cap for a single call but never widen it.
    """
    return list(iter_occurrences(schedule, horizon))


def next_occurrence(schedule: Schedule, after: dt.date) -> Optional[dt.date]:
    """First occurrence on or after ``after``; None once the schedule has run out."""
    for current in iter_occurrences(schedule):
        if current >= after:
            return current
    return None
