import datetime as dt

import pytest

from finplan_core.domain.errors import InconsistentStateError, ValidationError
from finplan_core.domain.models import EventKind, Investment, Money
from finplan_core.services import investments

WHEN = dt.datetime(2025, 3, 1, 9, 30, tzinfo=dt.timezone.utc)


def test_contribute_raises_balance_and_logs_event():
    inv = Investment("Tesouro", Money.parse("1000"), 11.5)
    updated, event = investments.contribute(inv, "250.50", at=WHEN)
    assert updated.current_value == Money.parse("1250.50")
    assert inv.current_value == Money.parse("1000")
    assert event.kind is EventKind.CONTRIBUTION
    assert event.investment_id == inv.id
    assert event.occurred_on == dt.date(2025, 3, 1)


def test_partial_withdrawal():
    inv = Investment("Tesouro", Money.parse("1000"))
    updated, event = investments.withdraw(inv, "400", at=WHEN)
    assert updated.current_value == Money.parse("600")
    assert event.kind is EventKind.WITHDRAWAL


def test_withdrawing_everything_closes_investment():
    inv = Investment("Tesouro", Money.parse("1000"))
    updated, event = investments.withdraw(inv, "1000", at=WHEN)
    assert updated is None
    assert event.amount == Money.parse("1000")


def test_overdraw_is_rejected():
    inv = Investment("Tesouro", Money.parse("1000"))
    with pytest.raises(InconsistentStateError):
        investments.withdraw(inv, "1000.01", at=WHEN)


def test_amount_must_be_positive():
    inv = Investment("Tesouro", Money.parse("1000"))
    with pytest.raises(ValidationError):
        investments.contribute(inv, "0")
    with pytest.raises(ValidationError):
        investments.withdraw(inv, "-5")
