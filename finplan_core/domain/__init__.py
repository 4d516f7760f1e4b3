from finplan_core.domain.errors import (  # noqa: F401
    BatchMaterializationError,
    FinPlanError,
    InconsistentStateError,
    ValidationError,
)
from finplan_core.domain.models import (  # noqa: F401
    ContributionPlan,
    EntryType,
    EventKind,
    Frequency,
    Granularity,
    GrowthConfig,
    GrowthResult,
    GrowthSample,
    Installment,
    InstallmentPlan,
    InstallmentPurchase,
    Investment,
    InvestmentEvent,
    LedgerEntry,
    Money,
    ObligationKind,
    PatrimonyAsset,
    PatrimonyPoint,
    PatrimonySummary,
    PortfolioSnapshot,
    RecurringObligation,
    Schedule,
    SourceType,
)

__all__ = [
    "BatchMaterializationError",
    "ContributionPlan",
    "EntryType",
    "EventKind",
    "FinPlanError",
    "Frequency",
    "Granularity",
    "GrowthConfig",
    "GrowthResult",
    "GrowthSample",
    "InconsistentStateError",
    "Installment",
    "InstallmentPlan",
    "InstallmentPurchase",
    "Investment",
    "InvestmentEvent",
    "LedgerEntry",
    "Money",
    "ObligationKind",
    "PatrimonyAsset",
    "PatrimonyPoint",
    "PatrimonySummary",
    "PortfolioSnapshot",
    "RecurringObligation",
    "Schedule",
    "SourceType",
    "ValidationError",
]
