"""
Backward reconstruction of net worth.

Only current investment balances and the dated contribution/withdrawal log are
stored, so past balances are inferred: events after a sample point are undone
and the remaining aggregate is discounted at the average monthly rate of the
current investments, as if the portfolio were a single instrument. Assets are
counted at their present estimate from the month they were acquired.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from finplan_core.domain.models import (
    EventKind,
    Granularity,
    Investment,
    InvestmentEvent,
    Money,
    PatrimonyAsset,
    PatrimonyPoint,
    PatrimonySummary,
)
from finplan_core.logging_config import get_logger
from finplan_core.services.annuity import monthly_rate, present_value_discount
from finplan_core.services.schedule import add_months

logger = get_logger("services.patrimony")


def month_end(date: dt.date) -> dt.date:
    return (pd.Timestamp(date) + pd.offsets.MonthEnd(0)).date()


def average_rate(investments: Sequence[Investment]) -> float:
    """Simple mean of the annual rates (percent), 0 without investments."""
    if not investments:
        return 0.0
    return sum(inv.estimated_annual_rate for inv in investments) / len(investments)


def _sum(amounts: Iterable[Money], currency: str) -> Money:
    total = Money.zero(currency)
    for amount in amounts:
        total = total + amount
    return total


def _label(point: dt.date, granularity: Granularity) -> str:
    if granularity is Granularity.YEARLY:
        return point.strftime("%Y")
    return point.strftime("%b/%y")


def reconstruct(
    investments: Sequence[Investment],
    events: Sequence[InvestmentEvent],
    assets: Sequence[PatrimonyAsset],
    granularity: Granularity = Granularity.MONTHLY,
    now: Optional[dt.date] = None,
    currency: str = "BRL",
) -> List[PatrimonyPoint]:
    granularity = Granularity(granularity)
    now = now or dt.date.today()
    rate = monthly_rate(average_rate(investments))
    total_current = _sum((inv.current_value for inv in investments), currency)

    points: List[PatrimonyPoint] = []
    for k in range(granularity.lookback, -1, -granularity.step):
        point = add_months(now, -k)
        end = month_end(point)

        future_contributions = _sum(
            (e.amount for e in events if e.kind is EventKind.CONTRIBUTION and e.occurred_on > end), currency
        )
        future_withdrawals = _sum(
            (e.amount for e in events if e.kind is EventKind.WITHDRAWAL and e.occurred_on > end), currency
        )
        undone = total_current - future_contributions + future_withdrawals
        base = max(undone.cents, 0) / 100
        investments_value = Money.parse(present_value_discount(base, rate, k), currency)

        assets_value = _sum((a.estimated_value for a in assets if a.held_since <= end), currency)

        points.append(
            PatrimonyPoint(
                label=_label(point, granularity),
                month_end=end,
                months_back=k,
                assets_value=assets_value,
                investments_value=investments_value,
            )
        )

    logger.info(
        "patrimony_reconstructed",
        extra={"granularity": granularity.value, "points": len(points), "monthly_rate": rate},
    )
    return points


def summarize(investments: Sequence[Investment], assets: Sequence[PatrimonyAsset], currency: str = "BRL") -> PatrimonySummary:
    return PatrimonySummary(
        total_assets=_sum((a.estimated_value for a in assets), currency),
        total_investments=_sum((inv.current_value for inv in investments), currency),
        average_rate=average_rate(investments),
    )


def to_frame(points: Sequence[PatrimonyPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "label": p.label,
                "month_end": p.month_end,
                "assets_value": p.assets_value.to_float(),
                "investments_value": p.investments_value.to_float(),
                "total": p.total.to_float(),
            }
            for p in points
        ],
        columns=["label", "month_end", "assets_value", "investments_value", "total"],
    )
