import datetime as dt

import pytest

from finplan_core.domain.errors import ValidationError
from finplan_core.domain.models import EntryType, Money, SourceType
from finplan_core.io.repository import InMemoryLedgerRepository
from finplan_core.services import installments


def test_plan_splits_and_dates_monthly():
    result = installments.plan(Money.parse("1000.00"), 3, dt.date(2025, 1, 1))
    assert [i.date for i in result.installments] == [dt.date(2025, 1, 1), dt.date(2025, 2, 1), dt.date(2025, 3, 1)]
    assert [str(i.amount) for i in result.installments] == ["333.33", "333.33", "333.34"]
    assert result.total == Money.parse("1000.00")
    assert result.installment_amount == Money.parse("333.33")


def test_plan_single_installment():
    result = installments.plan("99.99", 1, dt.date(2025, 3, 15))
    assert len(result.installments) == 1
    assert result.installments[0].amount == Money.parse("99.99")


def test_plan_month_end_start_clamps():
    result = installments.plan("300", 3, dt.date(2025, 1, 31))
    assert [i.date for i in result.installments] == [dt.date(2025, 1, 31), dt.date(2025, 2, 28), dt.date(2025, 3, 31)]


@pytest.mark.parametrize("total,count", [("0", 3), ("-10", 2), ("100", 0)])
def test_plan_rejects_bad_input(total, count):
    with pytest.raises(ValidationError):
        installments.plan(total, count, dt.date(2025, 1, 1))


def test_materialize_purchase_descriptions():
    purchase = installments.create_purchase("Electronics", "1000.00", 3, dt.date(2025, 1, 10), description="Laptop")
    entries = installments.materialize_purchase(purchase)
    assert [e.description for e in entries] == [
        "Laptop - Installment 1/3",
        "Laptop - Installment 2/3",
        "Laptop - Installment 3/3",
    ]
    assert all(e.entry_type is EntryType.FIXED_EXPENSE for e in entries)
    assert all(e.source_type is SourceType.INSTALLMENT and e.source_id == purchase.id for e in entries)


def test_materialize_purchase_into_repository():
    repo = InMemoryLedgerRepository()
    purchase = installments.create_purchase("Electronics", "1000.00", 3, dt.date(2025, 1, 10))
    installments.materialize_purchase_into(repo, purchase)
    stored = repo.entries_for(purchase.id)
    assert sum(e.amount.cents for e in stored) == 100000
    assert repo.get_owner(purchase.id).installment_count == 3


def test_pay_next_until_done():
    purchase = installments.create_purchase("Furniture", "600", 3, dt.date(2025, 1, 1))
    assert installments.pay_next(purchase) is True
    assert installments.pay_next(purchase) is True
    assert purchase.active is True
    assert installments.next_due_date(purchase) == dt.date(2025, 3, 1)
    assert installments.pay_next(purchase) is True
    assert purchase.paid_count == 3
    assert purchase.active is False

    assert installments.pay_next(purchase) is False
    assert purchase.paid_count == 3
    assert purchase.active is False
    assert installments.next_due_date(purchase) is None


def test_remaining_amount_and_progress():
    purchase = installments.create_purchase("Phone", "1000.00", 3, dt.date(2025, 1, 1))
    installments.pay_next(purchase)
    assert installments.remaining_amount(purchase) == Money.parse("666.67")
    assert installments.progress(purchase) == pytest.approx(1 / 3)


def test_edit_purchase_clamps_paid_count():
    purchase = installments.create_purchase("Phone", "1200", 6, dt.date(2025, 1, 1))
    for _ in range(5):
        installments.pay_next(purchase)
    installments.edit_purchase(purchase, count=4, total="800")
    assert purchase.paid_count == 4
    assert purchase.active is False
    assert purchase.installment_amount == Money.parse("200")

    installments.edit_purchase(purchase, count=10)
    assert purchase.active is True


def test_monthly_commitment_ignores_finished_purchases():
    a = installments.create_purchase("A", "300", 3, dt.date(2025, 1, 1))
    b = installments.create_purchase("B", "100", 1, dt.date(2025, 1, 1))
    installments.pay_next(b)
    assert installments.monthly_commitment([a, b]) == Money.parse("100")
