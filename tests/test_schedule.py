import datetime as dt

import pytest

from finplan_core.domain.errors import ValidationError
from finplan_core.domain.models import Frequency, Schedule
from finplan_core.services.schedule import add_months, next_occurrence, occurrences


def test_open_ended_schedule_is_capped():
    rule = Schedule(start_date=dt.date(2025, 1, 1), frequency=Frequency.DAILY)
    dates = occurrences(rule)
    assert len(dates) == 12
    assert dates[-1] == dt.date(2025, 1, 12)


def test_month_end_is_clamped_not_skipped():
    rule = Schedule(start_date=dt.date(2025, 1, 31), frequency=Frequency.MONTHLY, horizon_cap=4)
    assert occurrences(rule) == [
        dt.date(2025, 1, 31),
        dt.date(2025, 2, 28),
        dt.date(2025, 3, 31),
        dt.date(2025, 4, 30),
    ]


def test_leap_year_february():
    rule = Schedule(start_date=dt.date(2024, 1, 31), frequency=Frequency.MONTHLY, horizon_cap=2)
    assert occurrences(rule)[1] == dt.date(2024, 2, 29)


def test_yearly_from_leap_day():
    rule = Schedule(start_date=dt.date(2024, 2, 29), frequency=Frequency.YEARLY, horizon_cap=2)
    assert occurrences(rule) == [dt.date(2024, 2, 29), dt.date(2025, 2, 28)]


def test_end_date_stops_enumeration():
    rule = Schedule(
        start_date=dt.date(2025, 1, 1),
        frequency=Frequency.WEEKLY,
        end_date=dt.date(2025, 1, 22),
    )
    assert occurrences(rule) == [
        dt.date(2025, 1, 1),
        dt.date(2025, 1, 8),
        dt.date(2025, 1, 15),
        dt.date(2025, 1, 22),
    ]


@pytest.mark.parametrize("frequency", list(Frequency))
def test_occurrences_bounded_and_ordered(frequency):
    rule = Schedule(start_date=dt.date(2025, 5, 31), frequency=frequency, horizon_cap=30)
    dates = occurrences(rule)
    assert len(dates) <= rule.horizon_cap
    assert dates == sorted(dates)


def test_horizon_only_tightens_cap():
    rule = Schedule(start_date=dt.date(2025, 1, 1), horizon_cap=5)
    assert len(occurrences(rule, horizon=3)) == 3
    assert len(occurrences(rule, horizon=50)) == 5


def test_enumeration_is_restartable():
    rule = Schedule(start_date=dt.date(2025, 1, 1))
    assert rule.occurrences() == rule.occurrences()


def test_end_before_start_rejected():
    with pytest.raises(ValidationError):
        Schedule(start_date=dt.date(2025, 2, 1), end_date=dt.date(2025, 1, 1))
    with pytest.raises(ValidationError):
        Schedule(start_date=dt.date(2025, 2, 1), horizon_cap=0)


def test_next_occurrence():
    rule = Schedule(start_date=dt.date(2025, 1, 15), horizon_cap=3)
    assert next_occurrence(rule, dt.date(2025, 2, 1)) == dt.date(2025, 2, 15)
    assert next_occurrence(rule, dt.date(2025, 6, 1)) is None
    assert add_months(dt.date(2025, 3, 31), -1) == dt.date(2025, 2, 28)
