"""
Closed-form compound-interest formulas with monthly periods.

Rates passed to the formulas are periodic (monthly) rates. Annual percentages
are converted with ``monthly_rate``, a plain division by twelve rather than a
geometric equivalent; stored projections and charts rely on that convention.
"""

from __future__ import annotations

from finplan_core.domain.errors import ValidationError
from finplan_core.domain.models import ContributionPlan


def monthly_rate(annual_rate_pct: float) -> float:
    return annual_rate_pct / 100 / 12


def future_value(principal: float, contribution: float, rate: float, periods: int) -> float:
    """Balance after ``periods`` months: principal compounded plus an ordinary annuity of contributions."""
    if periods < 0:
        raise ValidationError("periods must not be negative", field="periods")
    if rate <= -1:
        raise ValidationError("rate must be greater than -100%", field="rate")
    if rate == 0:
        return principal + contribution * periods
    growth = (1 + rate) ** periods
    return principal * growth + contribution * (growth - 1) / rate


def required_payment(target_fv: float, rate: float, periods: int) -> float:
    """Monthly contribution (PMT) that reaches ``target_fv`` after ``periods`` months from zero."""
    if target_fv <= 0:
        raise ValidationError("target value must be positive", field="target_fv")
    if rate <= 0:
        raise ValidationError("rate must be positive", field="rate")
    if periods <= 0:
        raise ValidationError("periods must be positive", field="periods")
    return target_fv * rate / ((1 + rate) ** periods - 1)


def present_value_discount(current_value: float, rate: float, periods_back: int) -> float:
    if rate <= -1:
        raise ValidationError("rate must be greater than -100%", field="rate")
    if periods_back < 0:
        raise ValidationError("periods_back must not be negative", field="periods_back")
    if periods_back == 0:
        return current_value
    return current_value / (1 + rate) ** periods_back


def plan_contribution(target: float, annual_rate_pct: float, months: int) -> ContributionPlan:
    payment = required_payment(target, monthly_rate(annual_rate_pct), months)
    return ContributionPlan(target=target, months=months, annual_rate=annual_rate_pct, monthly_payment=payment)
