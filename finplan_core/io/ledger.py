from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import pandas as pd

from finplan_core.domain.models import EntryType, LedgerEntry, Money, SourceType

REQUIRED_COLUMNS = {"date", "type", "category", "amount"}
COLUMNS = ["id", "date", "type", "category", "amount", "description", "source_type", "source_id"]


def ledger_to_frame(entries: Iterable[LedgerEntry]) -> pd.DataFrame:
    rows = [
        {
            "id": e.id,
            "date": e.date.isoformat(),
            "type": e.entry_type.value,
            "category": e.category,
            "amount": str(e.amount),
            "description": e.description,
            "source_type": e.source_type.value,
            "source_id": e.source_id or "",
        }
        for e in entries
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def write_ledger(entries: Iterable[LedgerEntry], csv_path: str | Path) -> Path:
    path = Path(csv_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    ledger_to_frame(entries).to_csv(path, index=False)
    return path


def load_ledger(csv_path: str | Path, currency: str = "BRL") -> List[LedgerEntry]:
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(path)

    # amounts stay strings so they never pass through a binary float
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in ledger CSV: {missing}")

    df["date"] = pd.to_datetime(df["date"]).dt.date
    entries: List[LedgerEntry] = []
    for _, row in df.iterrows():
        extra = {"id": row["id"]} if row.get("id") else {}
        entries.append(
            LedgerEntry(
                entry_type=EntryType(str(row["type"]).lower()),
                category=str(row["category"]),
                amount=Money.parse(row["amount"], currency),
                date=row["date"],
                description=str(row.get("description", "")),
                source_type=SourceType(row.get("source_type") or "none"),
                source_id=row.get("source_id") or None,
                **extra,
            )
        )
    return entries
