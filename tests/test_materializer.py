import datetime as dt

import pytest

from finplan_core.domain.errors import BatchMaterializationError, ValidationError
from finplan_core.domain.models import (
    EntryType,
    Frequency,
    LedgerEntry,
    Money,
    ObligationKind,
    RecurringObligation,
    Schedule,
    SourceType,
)
from finplan_core.io.repository import InMemoryLedgerRepository
from finplan_core.services import materializer


def _rent(**kwargs):
    schedule = Schedule(start_date=dt.date(2025, 1, 31), frequency=Frequency.MONTHLY, horizon_cap=6)
    params = dict(schedule=schedule, category="Housing", amount=Money.parse("1500.00"), description="Rent")
    params.update(kwargs)
    return RecurringObligation(**params)


def test_materialize_tags_every_entry():
    rent = _rent()
    entries = materializer.materialize(rent)
    assert len(entries) == 6
    assert {e.source_id for e in entries} == {rent.id}
    assert all(e.source_type is SourceType.RECURRING for e in entries)
    assert all(e.entry_type is EntryType.FIXED_EXPENSE for e in entries)
    assert entries[0].description == "Rent (Recurring - Monthly)"
    assert entries[1].date == dt.date(2025, 2, 28)


def test_income_obligation_produces_income_entries():
    salary = _rent(kind=ObligationKind.INCOME, category="Salary", description="")
    entries = materializer.materialize(salary)
    assert all(e.entry_type is EntryType.INCOME for e in entries)
    assert entries[0].description == "Salary (Recurring - Monthly)"


def test_paused_obligation_materializes_nothing():
    rent = _rent()
    rent.pause()
    assert materializer.materialize(rent) == []


def test_obligation_rejects_non_positive_amount():
    with pytest.raises(ValidationError):
        _rent(amount=Money.zero())


def test_materialize_into_persists_batch_and_owner():
    repo = InMemoryLedgerRepository()
    rent = _rent()
    stored = materializer.materialize_into(repo, rent)
    assert len(repo.entries_for(rent.id)) == len(stored) == 6
    assert repo.get_owner(rent.id).category == "Housing"


def test_batch_is_all_or_nothing():
    repo = InMemoryLedgerRepository()
    good = LedgerEntry(EntryType.FIXED_EXPENSE, "Food", Money.parse("10"), dt.date(2025, 1, 1))
    bad = LedgerEntry(EntryType.FIXED_EXPENSE, "Food", Money.zero(), dt.date(2025, 2, 1))
    with pytest.raises(BatchMaterializationError):
        materializer.persist_batch(repo, [good, bad], source_id=None)
    assert repo.entries == {}


def test_duplicate_ids_reject_whole_batch():
    repo = InMemoryLedgerRepository()
    first = LedgerEntry(EntryType.INCOME, "Salary", Money.parse("10"), dt.date(2025, 1, 1))
    repo.insert_batch([first])
    fresh = LedgerEntry(EntryType.INCOME, "Salary", Money.parse("10"), dt.date(2025, 2, 1))
    with pytest.raises(BatchMaterializationError):
        repo.insert_batch([fresh, first])
    assert list(repo.entries) == [first.id]


def test_delete_future_keeps_past_and_deactivates_owner():
    repo = InMemoryLedgerRepository()
    rent = _rent()
    materializer.materialize_into(repo, rent)

    removed = materializer.delete_future(repo, rent, today=dt.date(2025, 4, 1))

    remaining = repo.entries_for(rent.id)
    assert removed == 3
    assert [e.date for e in remaining] == [dt.date(2025, 1, 31), dt.date(2025, 2, 28), dt.date(2025, 3, 31)]
    assert rent.active is False
    assert repo.get_owner(rent.id).active is False
    assert materializer.materialize(rent) == []


def test_delete_single_entry_leaves_siblings():
    repo = InMemoryLedgerRepository()
    rent = _rent()
    entries = materializer.materialize_into(repo, rent)
    assert materializer.delete_entry(repo, entries[2].id) is True
    assert materializer.delete_entry(repo, entries[2].id) is False
    assert len(repo.entries_for(rent.id)) == 5
    assert repo.get_owner(rent.id).active is True


def _every(frequency, amount, active=True):
    schedule = Schedule(start_date=dt.date(2025, 1, 1), frequency=frequency)
    return RecurringObligation(schedule=schedule, category="Bills", amount=Money.parse(amount), active=active)


@pytest.mark.parametrize(
    "frequency,amount,expected",
    [
        (Frequency.DAILY, "10", "300.00"),
        (Frequency.WEEKLY, "50", "200.00"),
        (Frequency.MONTHLY, "1000", "1000.00"),
        (Frequency.YEARLY, "100", "8.33"),
    ],
)
def test_monthly_equivalent_per_frequency(frequency, amount, expected):
    assert str(materializer.monthly_equivalent(_every(frequency, amount))) == expected


def test_monthly_commitment_skips_paused():
    obligations = [
        _every(Frequency.DAILY, "10"),
        _every(Frequency.WEEKLY, "50"),
        _every(Frequency.MONTHLY, "1000"),
        _every(Frequency.YEARLY, "1200"),
        _every(Frequency.MONTHLY, "500", active=False),
    ]
    assert materializer.monthly_commitment(obligations) == Money.parse("1600")
    assert materializer.monthly_commitment([]) == Money.zero()
