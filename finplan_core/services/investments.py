from __future__ import annotations

import dataclasses
import datetime as dt
from typing import Optional, Tuple, Union

from finplan_core.domain.errors import InconsistentStateError, ValidationError
from finplan_core.domain.models import EventKind, Investment, InvestmentEvent, Money
from finplan_core.logging_config import get_logger

logger = get_logger("services.investments")


def _positive(amount: Union[Money, float, str]) -> Money:
    amount = Money.parse(amount)
    if not amount.is_positive():
        raise ValidationError("Amount must be positive", field="amount")
    return amount


def contribute(
    investment: Investment, amount: Union[Money, float, str], at: Optional[dt.datetime] = None
) -> Tuple[Investment, InvestmentEvent]:
    amount = _positive(amount)
    event = InvestmentEvent(
        kind=EventKind.CONTRIBUTION,
        amount=amount,
        occurred_at=at or dt.datetime.now(dt.timezone.utc),
        investment_id=investment.id,
    )
    return dataclasses.replace(investment, current_value=investment.current_value + amount), event


def withdraw(
    investment: Investment, amount: Union[Money, float, str], at: Optional[dt.datetime] = None
) -> Tuple[Optional[Investment], InvestmentEvent]:
    """
    Returns the updated investment, or None when the withdrawal empties it and it
    is closed. Withdrawing more than the balance is rejected untouched.
    """
    amount = _positive(amount)
    if amount > investment.current_value:
        raise InconsistentStateError(
            f"Withdrawal of {amount} exceeds the balance of {investment.current_value} in {investment.name!r}"
        )
    event = InvestmentEvent(
        kind=EventKind.WITHDRAWAL,
        amount=amount,
        occurred_at=at or dt.datetime.now(dt.timezone.utc),
        investment_id=investment.id,
    )
    remaining = investment.current_value - amount
    if not remaining.is_positive():
        logger.info("investment_closed", extra={"investment_id": investment.id})
        return None, event
    return dataclasses.replace(investment, current_value=remaining), event
