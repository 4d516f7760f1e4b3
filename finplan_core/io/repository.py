from __future__ import annotations

import copy
import datetime as dt
from typing import Dict, List, Optional, Protocol, Sequence, Union

from finplan_core.domain.errors import BatchMaterializationError, FinPlanError, ValidationError
from finplan_core.domain.models import InstallmentPurchase, LedgerEntry, RecurringObligation
from finplan_core.logging_config import get_logger

logger = get_logger("io.repository")

Owner = Union[RecurringObligation, InstallmentPurchase]


class LedgerRepository(Protocol):
    """Persistence collaborator. ``insert_batch`` stores every entry or none of them."""

    def insert_batch(self, entries: Sequence[LedgerEntry]) -> int: ...

    def delete_where(self, source_id: str, date_from: dt.date) -> int: ...

    def delete(self, entry_id: str) -> bool: ...

    def update(self, entity: Union[LedgerEntry, RecurringObligation, InstallmentPurchase]) -> None: ...

    def entries_for(self, source_id: str) -> List[LedgerEntry]: ...


class InMemoryLedgerRepository:
    """Dict-backed repository used by the CLI and tests."""

    def __init__(self) -> None:
        self.entries: Dict[str, LedgerEntry] = {}
        self.obligations: Dict[str, RecurringObligation] = {}
        self.purchases: Dict[str, InstallmentPurchase] = {}

    def insert_batch(self, entries: Sequence[LedgerEntry]) -> int:
        entries = list(entries)
        seen = set()
        try:
            for entry in entries:
                entry.validate()
                if entry.id in self.entries or entry.id in seen:
                    raise ValidationError(f"Duplicate entry id {entry.id}", field="id")
                seen.add(entry.id)
        except FinPlanError as exc:
            source_id = entries[0].source_id if entries else None
            raise BatchMaterializationError(str(exc), source_id=source_id, size=len(entries)) from exc

        for entry in entries:
            self.entries[entry.id] = entry
        logger.debug("batch_inserted", extra={"size": len(entries)})
        return len(entries)

    def delete_where(self, source_id: str, date_from: dt.date) -> int:
        doomed = [e.id for e in self.entries.values() if e.source_id == source_id and e.date >= date_from]
        for entry_id in doomed:
            del self.entries[entry_id]
        return len(doomed)

    def delete(self, entry_id: str) -> bool:
        return self.entries.pop(entry_id, None) is not None

    def update(self, entity: Union[LedgerEntry, RecurringObligation, InstallmentPurchase]) -> None:
        if isinstance(entity, LedgerEntry):
            if entity.id not in self.entries:
                raise KeyError(entity.id)
            entity.validate()
            self.entries[entity.id] = entity
        elif isinstance(entity, RecurringObligation):
            self.obligations[entity.id] = copy.deepcopy(entity)
        elif isinstance(entity, InstallmentPurchase):
            self.purchases[entity.id] = copy.deepcopy(entity)
        else:
            raise TypeError(f"Unsupported entity {type(entity).__name__}")

    def entries_for(self, source_id: str) -> List[LedgerEntry]:
        return sorted((e for e in self.entries.values() if e.source_id == source_id), key=lambda e: e.date)

    def get_owner(self, source_id: str) -> Optional[Owner]:
        return self.obligations.get(source_id) or self.purchases.get(source_id)

    def all_entries(self) -> List[LedgerEntry]:
        return sorted(self.entries.values(), key=lambda e: (e.date, e.category))
