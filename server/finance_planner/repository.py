from __future__ import annotations

import datetime as dt
from typing import List, Sequence, Union

from django.db import DatabaseError, transaction

from finplan_core.domain import models as domain
from finplan_core.domain.errors import BatchMaterializationError, FinPlanError
from finplan_core.logging_config import get_logger

from .models import InstallmentPurchase, LedgerEntry, RecurringObligation

logger = get_logger("server.repository")


class DjangoLedgerRepository:
    """ORM-backed repository; batches are written inside a single transaction."""

    def insert_batch(self, entries: Sequence[domain.LedgerEntry]) -> int:
        entries = list(entries)
        source_id = entries[0].source_id if entries else None
        try:
            for entry in entries:
                entry.validate()
            with transaction.atomic():
                LedgerEntry.objects.bulk_create([LedgerEntry.from_domain(e) for e in entries])
        except (FinPlanError, DatabaseError) as exc:
            raise BatchMaterializationError(str(exc), source_id=source_id, size=len(entries)) from exc
        logger.debug("batch_inserted", extra={"size": len(entries), "source_id": source_id})
        return len(entries)

    def delete_where(self, source_id: str, date_from: dt.date) -> int:
        deleted, _ = LedgerEntry.objects.filter(source_id=source_id, date__gte=date_from).delete()
        return deleted

    def delete(self, entry_id: str) -> bool:
        deleted, _ = LedgerEntry.objects.filter(id=entry_id).delete()
        return deleted > 0

    def update(self, entity: Union[domain.LedgerEntry, domain.RecurringObligation, domain.InstallmentPurchase]) -> None:
        if isinstance(entity, domain.LedgerEntry):
            entity.validate()
            row = LedgerEntry.from_domain(entity)
            row.save(force_update=True)
        elif isinstance(entity, domain.RecurringObligation):
            record = RecurringObligation.objects.filter(id=entity.id).first() or RecurringObligation(id=entity.id)
            record.apply(entity)
            record.save()
        elif isinstance(entity, domain.InstallmentPurchase):
            record = InstallmentPurchase.objects.filter(id=entity.id).first() or InstallmentPurchase(id=entity.id)
            record.apply(entity)
            record.save()
        else:
            raise TypeError(f"Unsupported entity {type(entity).__name__}")

    def entries_for(self, source_id: str) -> List[domain.LedgerEntry]:
        return [row.to_domain() for row in LedgerEntry.objects.filter(source_id=source_id).order_by("date")]
