from finplan_core.services.annuity import (  # noqa: F401
    future_value,
    monthly_rate,
    plan_contribution,
    present_value_discount,
    required_payment,
)
from finplan_core.services.growth import simulate_growth  # noqa: F401
from finplan_core.services.installments import pay_next, plan  # noqa: F401
from finplan_core.services.materializer import delete_future, materialize, materialize_into  # noqa: F401
from finplan_core.services.patrimony import reconstruct, summarize  # noqa: F401
from finplan_core.services.schedule import occurrences  # noqa: F401

__all__ = [
    "future_value",
    "monthly_rate",
    "plan_contribution",
    "present_value_discount",
    "required_payment",
    "simulate_growth",
    "pay_next",
    "plan",
    "delete_future",
    "materialize",
    "materialize_into",
    "reconstruct",
    "summarize",
    "occurrences",
]
