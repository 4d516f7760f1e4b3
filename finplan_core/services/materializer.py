from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Union

from finplan_core.domain.errors import BatchMaterializationError, FinPlanError
from finplan_core.domain.models import (
    Frequency,
    InstallmentPurchase,
    LedgerEntry,
    Money,
    RecurringObligation,
    SourceType,
)
from finplan_core.io.repository import LedgerRepository
from finplan_core.logging_config import get_logger
from finplan_core.services.schedule import occurrences

logger = get_logger("services.materializer")


def recurring_description(obligation: RecurringObligation) -> str:
    base = obligation.description or obligation.category
    return f"{base} (Recurring - {obligation.schedule.frequency.label})"


def materialize(obligation: RecurringObligation) -> List[LedgerEntry]:
    """
    One ledger entry per schedule occurrence, each tagged back to the obligation.
    A paused obligation produces nothing.
    """
    if not obligation.active:
        logger.info("materialize_skipped_inactive", extra={"source_id": obligation.id})
        return []

    description = recurring_description(obligation)
    return [
        LedgerEntry(
            entry_type=obligation.kind.entry_type,
            category=obligation.category,
            amount=obligation.amount,
            date=when,
            description=description,
            source_type=SourceType.RECURRING,
            source_id=obligation.id,
        )
        for when in occurrences(obligation.schedule)
    ]


def monthly_equivalent(obligation: RecurringObligation) -> Money:
    """Approximate monthly cost: daily x30, weekly x4, yearly /12."""
    frequency = obligation.schedule.frequency
    if frequency is Frequency.DAILY:
        return obligation.amount * 30
    if frequency is Frequency.WEEKLY:
        return obligation.amount * 4
    if frequency is Frequency.YEARLY:
        return obligation.amount / 12
    return obligation.amount


def monthly_commitment(obligations: Iterable[RecurringObligation], currency: str = "BRL") -> Money:
    total = Money.zero(currency)
    for obligation in obligations:
        if obligation.active:
            total = total + monthly_equivalent(obligation)
    return total


def persist_batch(repository: LedgerRepository, entries: List[LedgerEntry], source_id: Optional[str]) -> List[LedgerEntry]:
    """Validate everything up front, then hand the whole batch to the repository in one call."""
    try:
        for entry in entries:
            entry.validate()
        repository.insert_batch(entries)
    except BatchMaterializationError:
        raise
    except FinPlanError as exc:
        raise BatchMaterializationError(str(exc), source_id=source_id, size=len(entries)) from exc
    logger.info("schedule_materialized", extra={"source_id": source_id, "entries": len(entries)})
    return entries


def materialize_into(repository: LedgerRepository, obligation: RecurringObligation) -> List[LedgerEntry]:
    entries = materialize(obligation)
    if not entries:
        return []
    persist_batch(repository, entries, obligation.id)
    repository.update(obligation)
    return entries


def delete_entry(repository: LedgerRepository, entry_id: str) -> bool:
    """Removes a single row; the owner and its other entries are left alone."""
    return repository.delete(entry_id)


def delete_future(
    repository: LedgerRepository,
    owner: Union[RecurringObligation, InstallmentPurchase],
    today: Optional[dt.date] = None,
) -> int:
    """
    Delete the owner's entries dated today or later and deactivate the owner so it
    does not regenerate. Entries already in the past stay untouched.
    """
    today = today or dt.date.today()
    removed = repository.delete_where(owner.id, today)
    owner.active = False
    repository.update(owner)
    logger.info("future_entries_deleted", extra={"source_id": owner.id, "removed": removed, "from": today.isoformat()})
    return removed
