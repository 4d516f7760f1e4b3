from __future__ import annotations

from typing import List

import numpy as np

from finplan_core.domain.errors import ValidationError
from finplan_core.domain.models import GrowthConfig, GrowthResult, GrowthSample
from finplan_core.logging_config import get_logger
from finplan_core.services.annuity import monthly_rate

logger = get_logger("services.growth")


def simulate_growth(config: GrowthConfig) -> GrowthResult:
    """
    Month-by-month compounding with a contribution at the end of each month.
    Samples are taken at every 12th month.
    """
    if config.initial < 0 or config.monthly_contribution < 0:
        raise ValidationError("initial amount and contribution must not be negative")
    if config.years < 0:
        raise ValidationError("years must not be negative", field="years")
    if config.annual_rate <= -1200:
        raise ValidationError("annual rate must be greater than -1200%", field="annual_rate")

    rate = monthly_rate(config.annual_rate)
    months = int(config.years) * 12
    balances = np.zeros(months, dtype=float)
    contributed = np.zeros(months, dtype=float)

    balance = float(config.initial)
    total_contributed = float(config.initial)
    for t in range(months):
        balance = balance * (1 + rate) + config.monthly_contribution
        total_contributed += config.monthly_contribution
        balances[t] = balance
        contributed[t] = total_contributed

    samples: List[GrowthSample] = [
        GrowthSample(year=(t + 1) // 12, balance=float(balances[t]), total_contributed=float(contributed[t]))
        for t in range(11, months, 12)
    ]

    logger.debug("growth_simulated", extra={"months": months, "final": balance})
    return GrowthResult(
        config=config,
        samples=samples,
        final_amount=balance,
        total_contributed=total_contributed,
        monthly_balances=balances,
    )
