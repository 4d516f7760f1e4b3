from finplan_core.io.ledger import load_ledger, write_ledger  # noqa: F401
from finplan_core.io.config import (  # noqa: F401
    load_engine_settings,
    load_growth_config,
    load_portfolio,
    load_schedule,
)
from finplan_core.io.repository import InMemoryLedgerRepository, LedgerRepository  # noqa: F401

__all__ = [
    "load_ledger",
    "write_ledger",
    "load_engine_settings",
    "load_growth_config",
    "load_portfolio",
    "load_schedule",
    "InMemoryLedgerRepository",
    "LedgerRepository",
]
