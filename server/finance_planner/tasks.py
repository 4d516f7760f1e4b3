from __future__ import annotations

from celery import shared_task
from django.db import transaction

from finplan_core.domain.errors import FinPlanError
from finplan_core.logging_config import get_logger
from finplan_core.services import installments, materializer

from .models import InstallmentPurchase, RecurringObligation
from .repository import DjangoLedgerRepository

logger = get_logger("server.tasks")


def _mark(record, status: str, error: str = "") -> None:
    with transaction.atomic():
        record.status = status
        record.error = error
        record.save(update_fields=["status", "error"])


@shared_task
def materialize_obligation(obligation_id: str) -> int:
    try:
        record = RecurringObligation.objects.get(id=obligation_id)
    except RecurringObligation.DoesNotExist:
        return 0

    try:
        entries = materializer.materialize_into(DjangoLedgerRepository(), record.to_domain())
    except FinPlanError as exc:
        logger.warning("obligation_materialization_failed", extra={"source_id": obligation_id, "error": str(exc)})
        _mark(record, "failed", str(exc))
        return 0

    record.refresh_from_db()
    _mark(record, "materialized")
    return len(entries)


@shared_task
def materialize_purchase(purchase_id: str) -> int:
    try:
        record = InstallmentPurchase.objects.get(id=purchase_id)
    except InstallmentPurchase.DoesNotExist:
        return 0

    try:
        entries = installments.materialize_purchase_into(DjangoLedgerRepository(), record.to_domain())
    except FinPlanError as exc:
        logger.warning("purchase_materialization_failed", extra={"source_id": purchase_id, "error": str(exc)})
        _mark(record, "failed", str(exc))
        return 0

    record.refresh_from_db()
    _mark(record, "materialized")
    return len(entries)
