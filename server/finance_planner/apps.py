from django.apps import AppConfig


class FinancePlannerConfig(AppConfig):
    name = "server.finance_planner"
    label = "finance_planner"
    default_auto_field = "django.db.models.BigAutoField"
