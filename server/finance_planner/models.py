import datetime as dt
import uuid

from django.db import models

from finplan_core.domain import models as domain


def _new_id() -> str:
    return str(uuid.uuid4())


def _money(value) -> domain.Money:
    return domain.Money.parse(value)


class RecurringObligation(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("materialized", "Materialized"),
        ("failed", "Failed"),
    ]

    id = models.CharField(max_length=36, primary_key=True, default=_new_id)
    created_at = models.DateTimeField(auto_now_add=True)
    category = models.CharField(max_length=120)
    description = models.CharField(max_length=255, blank=True, default="")
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    kind = models.CharField(max_length=16, choices=[(k.value, k.name.title()) for k in domain.ObligationKind])
    frequency = models.CharField(max_length=16, choices=[(f.value, f.label) for f in domain.Frequency])
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    horizon_cap = models.PositiveIntegerField(default=12)
    is_active = models.BooleanField(default=True)
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default="pending")
    error = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]

    def to_domain(self) -> domain.RecurringObligation:
        return domain.RecurringObligation(
            id=self.id,
            schedule=domain.Schedule(
                start_date=self.start_date,
                frequency=domain.Frequency(self.frequency),
                end_date=self.end_date,
                horizon_cap=self.horizon_cap,
            ),
            category=self.category,
            amount=_money(self.amount),
            kind=domain.ObligationKind(self.kind),
            description=self.description,
            active=self.is_active,
        )

    def apply(self, obligation: domain.RecurringObligation) -> None:
        self.category = obligation.category
        self.description = obligation.description
        self.amount = obligation.amount.to_decimal()
        self.kind = obligation.kind.value
        self.frequency = obligation.schedule.frequency.value
        self.start_date = obligation.schedule.start_date
        self.end_date = obligation.schedule.end_date
        self.horizon_cap = obligation.schedule.horizon_cap
        self.is_active = obligation.active


class InstallmentPurchase(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=_new_id)
    created_at = models.DateTimeField(auto_now_add=True)
    category = models.CharField(max_length=120)
    description = models.CharField(max_length=255, blank=True, default="")
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    installment_amount = models.DecimalField(max_digits=14, decimal_places=2)
    total_installments = models.PositiveIntegerField()
    paid_installments = models.PositiveIntegerField(default=0)
    start_date = models.DateField()
    is_active = models.BooleanField(default=True)
    status = models.CharField(max_length=32, choices=RecurringObligation.STATUS_CHOICES, default="pending")
    error = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]

    def to_domain(self) -> domain.InstallmentPurchase:
        return domain.InstallmentPurchase(
            id=self.id,
            category=self.category,
            description=self.description,
            total_amount=_money(self.total_amount),
            installment_count=self.total_installments,
            installment_amount=_money(self.installment_amount),
            paid_count=self.paid_installments,
            start_date=self.start_date,
            active=self.is_active,
        )

    def apply(self, purchase: domain.InstallmentPurchase) -> None:
        self.category = purchase.category
        self.description = purchase.description
        self.total_amount = purchase.total_amount.to_decimal()
        self.installment_amount = purchase.installment_amount.to_decimal()
        self.total_installments = purchase.installment_count
        self.paid_installments = purchase.paid_count
        self.start_date = purchase.start_date
        self.is_active = purchase.active


class LedgerEntry(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=_new_id)
    type = models.CharField(max_length=32, choices=[(t.value, t.value) for t in domain.EntryType])
    category = models.CharField(max_length=120)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    date = models.DateField()
    description = models.CharField(max_length=255, blank=True, default="")
    source_type = models.CharField(max_length=16, default=domain.SourceType.NONE.value)
    # weak back-reference to the obligation/purchase that produced the row, not a foreign key
    source_id = models.CharField(max_length=36, blank=True, default="", db_index=True)

    class Meta:
        ordering = ["date"]

    @classmethod
    def from_domain(cls, entry: domain.LedgerEntry) -> "LedgerEntry":
        return cls(
            id=entry.id,
            type=entry.entry_type.value,
            category=entry.category,
            amount=entry.amount.to_decimal(),
            date=entry.date,
            description=entry.description,
            source_type=entry.source_type.value,
            source_id=entry.source_id or "",
        )

    def to_domain(self) -> domain.LedgerEntry:
        return domain.LedgerEntry(
            id=self.id,
            entry_type=domain.EntryType(self.type),
            category=self.category,
            amount=_money(self.amount),
            date=self.date,
            description=self.description,
            source_type=domain.SourceType(self.source_type),
            source_id=self.source_id or None,
        )


class Investment(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=_new_id)
    created_at = models.DateTimeField(auto_now_add=True)
    name = models.CharField(max_length=120)
    current_value = models.DecimalField(max_digits=14, decimal_places=2)
    estimated_rate = models.FloatField(default=0.0)

    def to_domain(self) -> domain.Investment:
        return domain.Investment(
            id=self.id,
            name=self.name,
            current_value=_money(self.current_value),
            estimated_annual_rate=self.estimated_rate,
        )


class InvestmentEvent(models.Model):
    # kept after the investment is closed, so no foreign key
    investment_id = models.CharField(max_length=36, db_index=True)
    kind = models.CharField(max_length=16, choices=[(k.value, k.value) for k in domain.EventKind])
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    occurred_at = models.DateTimeField()

    class Meta:
        ordering = ["occurred_at"]

    def to_domain(self) -> domain.InvestmentEvent:
        return domain.InvestmentEvent(
            kind=domain.EventKind(self.kind),
            amount=_money(self.amount),
            occurred_at=self.occurred_at,
            investment_id=self.investment_id,
        )


class PatrimonyAsset(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=_new_id)
    created_at = models.DateField(default=dt.date.today)
    name = models.CharField(max_length=120)
    category = models.CharField(max_length=60, blank=True, default="")
    estimated_value = models.DecimalField(max_digits=14, decimal_places=2)
    acquisition_date = models.DateField(null=True, blank=True)

    def to_domain(self) -> domain.PatrimonyAsset:
        return domain.PatrimonyAsset(
            id=self.id,
            name=self.name,
            category=self.category,
            estimated_value=_money(self.estimated_value),
            acquisition_date=self.acquisition_date,
            created_at=self.created_at,
        )
