from django.urls import path

from .views import (
    DeleteFutureView,
    GrowthSimulationView,
    InstallmentPurchaseView,
    OccurrencesView,
    PatrimonyEvolutionView,
    PayInstallmentView,
    RecurringObligationView,
    RequiredPaymentView,
)

urlpatterns = [
    path("schedules/occurrences/", OccurrencesView.as_view(), name="schedule-occurrences"),
    path("recurring/", RecurringObligationView.as_view(), name="recurring-create"),
    path("installments/", InstallmentPurchaseView.as_view(), name="installment-create"),
    path("installments/<str:pk>/pay/", PayInstallmentView.as_view(), name="installment-pay"),
    path("sources/<str:source_id>/delete-future/", DeleteFutureView.as_view(), name="source-delete-future"),
    path("projections/required-payment/", RequiredPaymentView.as_view(), name="required-payment"),
    path("projections/growth/", GrowthSimulationView.as_view(), name="growth-simulation"),
    path("patrimony/evolution/", PatrimonyEvolutionView.as_view(), name="patrimony-evolution"),
]
