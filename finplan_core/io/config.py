from __future__ import annotations

import dataclasses
import datetime as dt
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from finplan_core.domain.models import (
    EventKind,
    Frequency,
    GrowthConfig,
    Investment,
    InvestmentEvent,
    Money,
    PatrimonyAsset,
    PortfolioSnapshot,
    Schedule,
)

SETTINGS_ENV = "FINPLAN_SETTINGS"


@dataclasses.dataclass(frozen=True)
class EngineSettings:
    horizon_cap: int = 12
    currency: str = "BRL"
    log_level: str = "WARNING"


def load_engine_settings(path: Optional[str | Path] = None) -> EngineSettings:
    """Settings from ``path``, else from the file named by $FINPLAN_SETTINGS, else defaults."""
    path = path or os.environ.get(SETTINGS_ENV)
    if not path:
        return EngineSettings()
    data = _read_json(path)
    return EngineSettings(
        horizon_cap=int(data.get("horizon_cap", 12)),
        currency=str(data.get("currency", "BRL")),
        log_level=str(data.get("log_level", "WARNING")).upper(),
    )


def load_growth_config(path: str | Path) -> GrowthConfig:
    data = _read_json(path)
    return GrowthConfig(
        initial=float(data.get("initial", 0.0)),
        monthly_contribution=float(data.get("monthly_contribution", 0.0)),
        annual_rate=float(data.get("annual_rate", 0.0)),
        years=int(data.get("years", 1)),
    )


def schedule_from_dict(data: Dict[str, Any], horizon_cap: int = 12) -> Schedule:
    end = data.get("end_date")
    return Schedule(
        start_date=_parse_date(data["start_date"]),
        frequency=Frequency(data.get("frequency", "monthly")),
        end_date=_parse_date(end) if end else None,
        horizon_cap=int(data.get("horizon_cap", horizon_cap)),
    )


def load_schedule(path: str | Path, horizon_cap: int = 12) -> Schedule:
    return schedule_from_dict(_read_json(path), horizon_cap)


def load_portfolio(path: str | Path, currency: str = "BRL") -> PortfolioSnapshot:
    """
    Portfolio JSON with ``investments``, ``events`` and ``assets`` lists, amounts as
    decimal strings or numbers and dates in ISO format.
    """
    data = _read_json(path)
    investments = [
        Investment(
            id=str(item.get("id") or item["name"]),
            name=item["name"],
            current_value=Money.parse(item["current_value"], currency),
            estimated_annual_rate=float(item.get("estimated_annual_rate", 0.0)),
        )
        for item in data.get("investments", [])
    ]
    events = [
        InvestmentEvent(
            kind=EventKind(item["kind"]),
            amount=Money.parse(item["amount"], currency),
            occurred_at=_parse_datetime(item["occurred_at"]),
            investment_id=item.get("investment_id"),
        )
        for item in data.get("events", [])
    ]
    assets = [
        PatrimonyAsset(
            id=str(item.get("id") or item["name"]),
            name=item["name"],
            category=item.get("category", ""),
            estimated_value=Money.parse(item["estimated_value"], currency),
            acquisition_date=_parse_date(item["acquisition_date"]) if item.get("acquisition_date") else None,
            created_at=_parse_date(item["created_at"]),
        )
        for item in data.get("assets", [])
    ]
    return PortfolioSnapshot(investments=investments, events=events, assets=assets)


def _parse_date(raw: str | dt.date) -> dt.date:
    if isinstance(raw, dt.date):
        return raw
    return dt.date.fromisoformat(str(raw)[:10])


def _parse_datetime(raw: str) -> dt.datetime:
    return dt.datetime.fromisoformat(str(raw))


def _read_json(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
