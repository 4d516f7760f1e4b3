"""
Tab-separated batch import, as pasted from a spreadsheet.

The first line is a header and is ignored. Columns, in order:
type, category, value, description, date, mode. ``mode`` is blank for a single
entry, ``<N>x`` for an installment purchase and a frequency word for a
recurring obligation.
"""

from __future__ import annotations

import csv
import dataclasses
import datetime as dt
import re
from typing import List, Optional, Sequence, Tuple

from finplan_core.domain.errors import FinPlanError, ValidationError
from finplan_core.domain.models import (
    EntryType,
    Frequency,
    LedgerEntry,
    Money,
    ObligationKind,
    RecurringObligation,
    Schedule,
)
from finplan_core.io.repository import LedgerRepository
from finplan_core.logging_config import get_logger
from finplan_core.services import installments as installment_service
from finplan_core.services import materializer

logger = get_logger("io.batch_import")

TYPE_MAP = {
    "income": EntryType.INCOME,
    "expense": EntryType.VARIABLE_EXPENSE,
    "fixed expense": EntryType.FIXED_EXPENSE,
    "variable expense": EntryType.VARIABLE_EXPENSE,
    "receivable": EntryType.RECEIVABLE,
    "debt": EntryType.DEBT,
    # spreadsheets exported by the pt-BR course material
    "receita": EntryType.INCOME,
    "despesa": EntryType.VARIABLE_EXPENSE,
    "despesa fixa": EntryType.FIXED_EXPENSE,
    "despesa variavel": EntryType.VARIABLE_EXPENSE,
    "despesa variável": EntryType.VARIABLE_EXPENSE,
    "a receber": EntryType.RECEIVABLE,
    "divida": EntryType.DEBT,
    "dívida": EntryType.DEBT,
}

FREQUENCY_MAP = {
    "daily": Frequency.DAILY,
    "weekly": Frequency.WEEKLY,
    "monthly": Frequency.MONTHLY,
    "yearly": Frequency.YEARLY,
    "recurring": Frequency.MONTHLY,
    "diario": Frequency.DAILY,
    "diário": Frequency.DAILY,
    "semanal": Frequency.WEEKLY,
    "mensal": Frequency.MONTHLY,
    "anual": Frequency.YEARLY,
    "recorrente": Frequency.MONTHLY,
}

_BR_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_INSTALLMENTS = re.compile(r"^(\d+)x$")


@dataclasses.dataclass
class ParsedRow:
    line: int
    entry_type: EntryType
    category: str
    amount: Optional[Money]
    description: str
    date: Optional[dt.date]
    mode: str = "single"  # single | recurring | installment
    installments: Optional[int] = None
    frequency: Optional[Frequency] = None
    errors: List[str] = dataclasses.field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclasses.dataclass
class ImportReport:
    saved: int = 0
    skipped: int = 0
    failures: List[Tuple[int, str]] = dataclasses.field(default_factory=list)


def parse_amount(raw: str) -> Optional[Money]:
    cleaned = re.sub(r"[^\d.,]", "", raw)
    if not cleaned:
        return None
    if "," in cleaned and "." in cleaned:
        decimal_sep = "," if cleaned.rfind(",") > cleaned.rfind(".") else "."
        thousands = "." if decimal_sep == "," else ","
        cleaned = cleaned.replace(thousands, "").replace(decimal_sep, ".")
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".") if cleaned.count(",") == 1 else cleaned.replace(",", "")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")
    try:
        return Money.parse(cleaned)
    except ValidationError:
        return None


def parse_date(raw: str, today: dt.date) -> Optional[dt.date]:
    if not raw:
        return today
    match = _BR_DATE.match(raw) or None
    try:
        if match:
            day, month, year = (int(g) for g in match.groups())
            return dt.date(year, month, day)
        match = _ISO_DATE.match(raw)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return dt.date(year, month, day)
    except ValueError:
        return None
    return None


def parse_mode(raw: str) -> Tuple[str, Optional[int], Optional[Frequency]]:
    normalized = raw.strip().lower()
    if not normalized:
        return "single", None, None
    match = _INSTALLMENTS.match(normalized)
    if match:
        return "installment", int(match.group(1)), None
    if normalized in FREQUENCY_MAP:
        return "recurring", None, FREQUENCY_MAP[normalized]
    return "single", None, None


def parse_batch_text(text: str, today: Optional[dt.date] = None) -> List[ParsedRow]:
    today = today or dt.date.today()
    lines = text.strip().splitlines()
    if len(lines) < 2:
        raise ValidationError("Batch needs a header line and at least one data line")

    rows: List[ParsedRow] = []
    reader = csv.reader(lines[1:], delimiter="\t")
    for offset, fields in enumerate(reader, start=2):
        if not any(f.strip() for f in fields):
            continue
        fields = [f.strip() for f in fields] + [""] * (6 - len(fields))
        raw_type, category, raw_value, description, raw_date, raw_mode = fields[:6]

        amount = parse_amount(raw_value)
        when = parse_date(raw_date, today)
        mode, count, frequency = parse_mode(raw_mode)
        errors = []
        if not category:
            errors.append("category is required")
        if amount is None or not amount.is_positive():
            errors.append("invalid value")
        if when is None:
            errors.append("invalid date")
        if mode == "installment" and not count:
            errors.append("installment count must be at least 1")

        rows.append(
            ParsedRow(
                line=offset,
                entry_type=TYPE_MAP.get(raw_type.lower(), EntryType.VARIABLE_EXPENSE),
                category=category,
                amount=amount,
                description=description,
                date=when,
                mode=mode,
                installments=count,
                frequency=frequency,
                errors=errors,
            )
        )
    return rows


def _persist_row(repository: LedgerRepository, row: ParsedRow, horizon_cap: int) -> None:
    if row.mode == "recurring":
        obligation = RecurringObligation(
            schedule=Schedule(start_date=row.date, frequency=row.frequency, horizon_cap=horizon_cap),
            category=row.category,
            amount=row.amount,
            kind=ObligationKind.INCOME if row.entry_type is EntryType.INCOME else ObligationKind.EXPENSE,
            description=row.description,
        )
        materializer.materialize_into(repository, obligation)
    elif row.mode == "installment":
        purchase = installment_service.create_purchase(
            row.category, row.amount, row.installments, row.date, description=row.description
        )
        installment_service.materialize_purchase_into(repository, purchase)
    else:
        entry = LedgerEntry(
            entry_type=row.entry_type,
            category=row.category,
            amount=row.amount,
            date=row.date,
            description=row.description,
        )
        materializer.persist_batch(repository, [entry], None)


def import_rows(repository: LedgerRepository, rows: Sequence[ParsedRow], horizon_cap: int = 12) -> ImportReport:
    """Each valid row is stored as its own atomic batch; invalid or rejected rows are reported."""
    report = ImportReport()
    for row in rows:
        if not row.is_valid:
            report.skipped += 1
            report.failures.append((row.line, "; ".join(row.errors)))
            continue
        try:
            _persist_row(repository, row, horizon_cap)
        except FinPlanError as exc:
            logger.warning("batch_row_rejected", extra={"line": row.line, "error": str(exc)})
            report.skipped += 1
            report.failures.append((row.line, str(exc)))
            continue
        report.saved += 1
    logger.info("batch_imported", extra={"saved": report.saved, "skipped": report.skipped})
    return report
