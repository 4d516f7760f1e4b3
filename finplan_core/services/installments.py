from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Union

from finplan_core.domain.errors import ValidationError
from finplan_core.domain.models import (
    EntryType,
    Installment,
    InstallmentPlan,
    InstallmentPurchase,
    LedgerEntry,
    Money,
    SourceType,
)
from finplan_core.io.repository import LedgerRepository
from finplan_core.logging_config import get_logger
from finplan_core.services.materializer import persist_batch
from finplan_core.services.schedule import add_months

logger = get_logger("services.installments")


def _validate(total: Money, count: int) -> None:
    if not total.is_positive():
        raise ValidationError("Purchase total must be positive", field="total_amount")
    if not isinstance(count, int) or count < 1:
        raise ValidationError("Installment count must be a positive integer", field="installment_count")


def plan(total: Union[Money, float, str], count: int, start_date: dt.date) -> InstallmentPlan:
    """
    Split ``total`` into ``count`` monthly installments starting on ``start_date``.
    Every installment is ``total / count`` rounded to the cent except the last,
    which absorbs the rounding remainder so the plan sums to ``total`` exactly.
    """
    total = Money.parse(total)
    _validate(total, count)
    amounts = total.allocate(count)
    installments = tuple(
        Installment(number=i + 1, date=add_months(start_date, i), amount=amounts[i]) for i in range(count)
    )
    return InstallmentPlan(installment_amount=amounts[0], installments=installments)


def create_purchase(
    category: str,
    total: Union[Money, float, str],
    count: int,
    start_date: dt.date,
    description: str = "",
) -> InstallmentPurchase:
    total = Money.parse(total)
    _validate(total, count)
    if not category.strip():
        raise ValidationError("Category is required", field="category")
    return InstallmentPurchase(
        category=category,
        description=description,
        total_amount=total,
        installment_count=count,
        installment_amount=total / count,
        start_date=start_date,
    )


def materialize_purchase(purchase: InstallmentPurchase) -> List[LedgerEntry]:
    base = purchase.description or purchase.category
    schedule = plan(purchase.total_amount, purchase.installment_count, purchase.start_date)
    return [
        LedgerEntry(
            entry_type=EntryType.FIXED_EXPENSE,
            category=purchase.category,
            amount=item.amount,
            date=item.date,
            description=f"{base} - Installment {item.number}/{purchase.installment_count}",
            source_type=SourceType.INSTALLMENT,
            source_id=purchase.id,
        )
        for item in schedule.installments
    ]


def materialize_purchase_into(repository: LedgerRepository, purchase: InstallmentPurchase) -> List[LedgerEntry]:
    entries = materialize_purchase(purchase)
    persist_batch(repository, entries, purchase.id)
    repository.update(purchase)
    return entries


def pay_next(purchase: InstallmentPurchase) -> bool:
    """
    Mark the next installment as paid. Returns False, leaving the purchase as it
    was, when every installment is already paid.
    """
    if purchase.paid_count >= purchase.installment_count:
        return False
    purchase.paid_count += 1
    if purchase.paid_count == purchase.installment_count:
        purchase.active = False
    logger.info(
        "installment_paid",
        extra={"source_id": purchase.id, "paid": purchase.paid_count, "of": purchase.installment_count},
    )
    return True


def edit_purchase(
    purchase: InstallmentPurchase,
    *,
    category: Optional[str] = None,
    description: Optional[str] = None,
    total: Union[Money, float, str, None] = None,
    count: Optional[int] = None,
    paid_count: Optional[int] = None,
    start_date: Optional[dt.date] = None,
) -> InstallmentPurchase:
    new_total = Money.parse(total) if total is not None else purchase.total_amount
    new_count = count if count is not None else purchase.installment_count
    _validate(new_total, new_count)
    if category is not None:
        if not category.strip():
            raise ValidationError("Category is required", field="category")
        purchase.category = category
    if description is not None:
        purchase.description = description
    if start_date is not None:
        purchase.start_date = start_date
    purchase.total_amount = new_total
    purchase.installment_count = new_count
    purchase.installment_amount = new_total / new_count
    paid = purchase.paid_count if paid_count is None else paid_count
    purchase.paid_count = max(0, min(paid, new_count))
    purchase.active = purchase.paid_count < new_count
    return purchase


def remaining_amount(purchase: InstallmentPurchase) -> Money:
    if purchase.remaining_count == 0:
        return Money.zero(purchase.total_amount.currency)
    amounts = purchase.total_amount.allocate(purchase.installment_count)
    remaining = Money.zero(purchase.total_amount.currency)
    for amount in amounts[purchase.paid_count:]:
        remaining = remaining + amount
    return remaining


def next_due_date(purchase: InstallmentPurchase) -> Optional[dt.date]:
    if purchase.remaining_count == 0:
        return None
    return add_months(purchase.start_date, purchase.paid_count)


def progress(purchase: InstallmentPurchase) -> float:
    return purchase.paid_count / purchase.installment_count


def monthly_commitment(purchases: Iterable[InstallmentPurchase], currency: str = "BRL") -> Money:
    total = Money.zero(currency)
    for purchase in purchases:
        if purchase.active:
            total = total + purchase.installment_amount
    return total
