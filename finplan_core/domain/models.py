from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Optional, Tuple, Union

import numpy as np

from finplan_core.domain.errors import ValidationError

_CENT = Decimal("0.01")


def _new_id() -> str:
    return str(uuid.uuid4())


def _round_cents(value: Decimal) -> int:
    return int(value.quantize(_CENT, rounding=ROUND_HALF_UP) * 100)


@dataclasses.dataclass(frozen=True, order=True)
class Money:
    """Integer-cent amount. Arithmetic returns new values; inexact results round half-up."""

    cents: int
    currency: str = "BRL"

    @classmethod
    def from_cents(cls, cents: int, currency: str = "BRL") -> "Money":
        return cls(int(cents), currency)

    @classmethod
    def zero(cls, currency: str = "BRL") -> "Money":
        return cls(0, currency)

    @classmethod
    def parse(cls, value: Union["Money", Decimal, float, int, str], currency: str = "BRL") -> "Money":
        if isinstance(value, Money):
            return value
        if isinstance(value, bool):
            raise ValidationError(f"Not a monetary amount: {value!r}", field="amount")
        try:
            # floats go through repr so 0.1 stays 0.1 instead of its binary expansion
            dec = Decimal(repr(value)) if isinstance(value, float) else Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValidationError(f"Not a monetary amount: {value!r}", field="amount") from exc
        if not dec.is_finite():
            raise ValidationError(f"Not a monetary amount: {value!r}", field="amount")
        return cls(_round_cents(dec), currency)

    def _check(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError("Currency mismatch")

    def __add__(self, other: "Money") -> "Money":
        self._check(other)
        return Money(self.cents + other.cents, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check(other)
        return Money(self.cents - other.cents, self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.cents, self.currency)

    def __mul__(self, factor: Union[int, float, Decimal]) -> "Money":
        if isinstance(factor, int):
            return Money(self.cents * factor, self.currency)
        scaled = Decimal(self.cents) * Decimal(repr(factor) if isinstance(factor, float) else factor)
        return Money(int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP)), self.currency)

    __rmul__ = __mul__

    def __truediv__(self, parts: int) -> "Money":
        if not isinstance(parts, int) or parts <= 0:
            raise ValidationError("Money can only be divided into a positive whole number of parts")
        quotient = Decimal(self.cents) / Decimal(parts)
        return Money(int(quotient.quantize(Decimal(1), rounding=ROUND_HALF_UP)), self.currency)

    def allocate(self, parts: int) -> List["Money"]:
        """Split into ``parts`` amounts of ``self / parts``; the last one absorbs the remainder."""
        share = self / parts
        last = self - share * (parts - 1)
        return [share] * (parts - 1) + [last]

    def is_positive(self) -> bool:
        return self.cents > 0

    def to_decimal(self) -> Decimal:
        return Decimal(self.cents) / 100

    def to_float(self) -> float:
        return self.cents / 100

    def __str__(self) -> str:
        return f"{self.to_decimal():.2f}"


class Frequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class EntryType(str, enum.Enum):
    INCOME = "income"
    FIXED_EXPENSE = "fixed_expense"
    VARIABLE_EXPENSE = "variable_expense"
    RECEIVABLE = "receivable"
    DEBT = "debt"


class SourceType(str, enum.Enum):
    NONE = "none"
    RECURRING = "recurring"
    INSTALLMENT = "installment"


class ObligationKind(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def entry_type(self) -> EntryType:
        return EntryType.INCOME if self is ObligationKind.INCOME else EntryType.FIXED_EXPENSE


@dataclasses.dataclass(frozen=True)
class Schedule:
    start_date: dt.date
    frequency: Frequency = Frequency.MONTHLY
    end_date: Optional[dt.date] = None
    horizon_cap: int = 12

    def __post_init__(self) -> None:
        if not isinstance(self.start_date, dt.date):
            raise ValidationError("start_date must be a date", field="start_date")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValidationError("end_date must not be before start_date", field="end_date")
        if self.horizon_cap < 1:
            raise ValidationError("horizon_cap must be at least 1", field="horizon_cap")
        object.__setattr__(self, "frequency", Frequency(self.frequency))

    def occurrences(self, horizon: Optional[int] = None) -> List[dt.date]:
        from finplan_core.services.schedule import occurrences

        return occurrences(self, horizon)


@dataclasses.dataclass(frozen=True)
class LedgerEntry:
    entry_type: EntryType
    category: str
    amount: Money
    date: dt.date
    description: str = ""
    source_type: SourceType = SourceType.NONE
    source_id: Optional[str] = None
    id: str = dataclasses.field(default_factory=_new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entry_type", EntryType(self.entry_type))
        object.__setattr__(self, "source_type", SourceType(self.source_type))

    def validate(self) -> None:
        if not self.amount.is_positive():
            raise ValidationError(f"Entry amount must be positive, got {self.amount}", field="amount")
        if not self.category.strip():
            raise ValidationError("Entry category is required", field="category")
        if not isinstance(self.date, dt.date):
            raise ValidationError("Entry date must be a date", field="date")
        if self.source_type is not SourceType.NONE and not self.source_id:
            raise ValidationError("Entries with a source_type need a source_id", field="source_id")


@dataclasses.dataclass
class RecurringObligation:
    schedule: Schedule
    category: str
    amount: Money
    kind: ObligationKind = ObligationKind.EXPENSE
    description: str = ""
    active: bool = True
    id: str = dataclasses.field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not self.amount.is_positive():
            raise ValidationError("Recurring amount must be positive", field="amount")
        if not self.category.strip():
            raise ValidationError("Category is required", field="category")
        self.kind = ObligationKind(self.kind)

    def pause(self) -> None:
        self.active = False

    def resume(self) -> None:
        self.active = True

    def replace_schedule(self, schedule: Schedule) -> None:
        self.schedule = schedule


@dataclasses.dataclass
class InstallmentPurchase:
    category: str
    total_amount: Money
    installment_count: int
    installment_amount: Money
    start_date: dt.date
    description: str = ""
    paid_count: int = 0
    active: bool = True
    id: str = dataclasses.field(default_factory=_new_id)

    @property
    def remaining_count(self) -> int:
        return self.installment_count - self.paid_count


@dataclasses.dataclass(frozen=True)
class Installment:
    number: int
    date: dt.date
    amount: Money


@dataclasses.dataclass(frozen=True)
class InstallmentPlan:
    installment_amount: Money
    installments: Tuple[Installment, ...]

    @property
    def total(self) -> Money:
        total = Money.zero(self.installment_amount.currency)
        for item in self.installments:
            total = total + item.amount
        return total


@dataclasses.dataclass(frozen=True)
class Investment:
    name: str
    current_value: Money
    estimated_annual_rate: float = 0.0  # percent per year
    id: str = dataclasses.field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if self.estimated_annual_rate <= -1200:
            raise ValidationError("estimated annual rate must be greater than -1200%", field="estimated_annual_rate")


class EventKind(str, enum.Enum):
    CONTRIBUTION = "contribution"
    WITHDRAWAL = "withdrawal"


@dataclasses.dataclass(frozen=True)
class InvestmentEvent:
    kind: EventKind
    amount: Money
    occurred_at: dt.datetime
    investment_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", EventKind(self.kind))

    @property
    def occurred_on(self) -> dt.date:
        if isinstance(self.occurred_at, dt.datetime):
            return self.occurred_at.date()
        return self.occurred_at


@dataclasses.dataclass(frozen=True)
class PatrimonyAsset:
    name: str
    estimated_value: Money
    created_at: dt.date
    category: str = ""
    acquisition_date: Optional[dt.date] = None
    id: str = dataclasses.field(default_factory=_new_id)

    @property
    def held_since(self) -> dt.date:
        return self.acquisition_date or self.created_at


@dataclasses.dataclass(frozen=True)
class GrowthConfig:
    initial: float = 0.0
    monthly_contribution: float = 0.0
    annual_rate: float = 0.0  # percent per year
    years: int = 1


@dataclasses.dataclass(frozen=True)
class GrowthSample:
    year: int
    balance: float
    total_contributed: float


@dataclasses.dataclass
class GrowthResult:
    config: GrowthConfig
    samples: List[GrowthSample]
    final_amount: float
    total_contributed: float
    monthly_balances: np.ndarray

    @property
    def total_interest(self) -> float:
        return self.final_amount - self.total_contributed


@dataclasses.dataclass(frozen=True)
class ContributionPlan:
    target: float
    months: int
    annual_rate: float
    monthly_payment: float

    @property
    def total_contributed(self) -> float:
        return self.monthly_payment * self.months

    @property
    def total_interest(self) -> float:
        return self.target - self.total_contributed


class Granularity(str, enum.Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @property
    def step(self) -> int:
        return {"monthly": 1, "quarterly": 3, "yearly": 12}[self.value]

    @property
    def lookback(self) -> int:
        return 24 if self is Granularity.YEARLY else 12


@dataclasses.dataclass(frozen=True)
class PatrimonyPoint:
    label: str
    month_end: dt.date
    months_back: int
    assets_value: Money
    investments_value: Money

    @property
    def total(self) -> Money:
        return self.assets_value + self.investments_value


@dataclasses.dataclass(frozen=True)
class PatrimonySummary:
    total_assets: Money
    total_investments: Money
    average_rate: float

    @property
    def total(self) -> Money:
        return self.total_assets + self.total_investments


@dataclasses.dataclass
class PortfolioSnapshot:
    investments: List[Investment]
    events: List[InvestmentEvent]
    assets: List[PatrimonyAsset]
