import datetime as dt

from django.http import Http404
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser
from rest_framework.response import Response
from rest_framework.views import APIView

from finplan_core.domain.errors import FinPlanError
from finplan_core.domain.models import Frequency, Granularity, GrowthConfig, Money, Schedule
from finplan_core.services import annuity, growth, installments, materializer, patrimony
from finplan_core.services import schedule as schedule_service

from .models import InstallmentPurchase, Investment, InvestmentEvent, PatrimonyAsset, RecurringObligation
from .repository import DjangoLedgerRepository
from .serializers import (
    GrowthRequestSerializer,
    InstallmentPurchaseRequestSerializer,
    InstallmentPurchaseSerializer,
    PatrimonyQuerySerializer,
    RecurringObligationRequestSerializer,
    RecurringObligationSerializer,
    RequiredPaymentSerializer,
    ScheduleSerializer,
)
from .tasks import materialize_obligation, materialize_purchase


def _engine_error(exc: FinPlanError) -> Response:
    return Response({"code": exc.code, "detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


class OccurrencesView(APIView):
    parser_classes = [JSONParser, FormParser]

    def post(self, request):
        serializer = ScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            rule = Schedule(
                start_date=data["start_date"],
                frequency=Frequency(data["frequency"]),
                end_date=data.get("end_date"),
                horizon_cap=data["horizon_cap"],
            )
        except FinPlanError as exc:
            return _engine_error(exc)
        return Response({"dates": [d.isoformat() for d in schedule_service.occurrences(rule)]})


class RecurringObligationView(APIView):
    parser_classes = [JSONParser, FormParser]

    def post(self, request):
        serializer = RecurringObligationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        record = RecurringObligation.objects.create(
            category=data["category"],
            description=data.get("description", ""),
            amount=data["amount"],
            kind=data["kind"],
            frequency=data["frequency"],
            start_date=data["start_date"],
            end_date=data.get("end_date"),
            horizon_cap=data["horizon_cap"],
            status="pending",
        )

        materialize_obligation.delay(record.id)
        return Response(RecurringObligationSerializer(record).data, status=status.HTTP_202_ACCEPTED)


class InstallmentPurchaseView(APIView):
    parser_classes = [JSONParser, FormParser]

    def post(self, request):
        serializer = InstallmentPurchaseRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            purchase = installments.create_purchase(
                data["category"],
                Money.parse(data["total_amount"]),
                data["total_installments"],
                data["start_date"],
                description=data.get("description", ""),
            )
        except FinPlanError as exc:
            return _engine_error(exc)

        record = InstallmentPurchase(id=purchase.id, status="pending")
        record.apply(purchase)
        record.save()

        materialize_purchase.delay(record.id)
        return Response(InstallmentPurchaseSerializer(record).data, status=status.HTTP_202_ACCEPTED)


class PayInstallmentView(APIView):
    def post(self, request, pk: str):
        try:
            record = InstallmentPurchase.objects.get(pk=pk)
        except InstallmentPurchase.DoesNotExist as exc:
            raise Http404 from exc

        purchase = record.to_domain()
        changed = installments.pay_next(purchase)
        if changed:
            record.apply(purchase)
            record.save(update_fields=["paid_installments", "is_active"])
        payload = InstallmentPurchaseSerializer(record).data
        payload["changed"] = changed
        return Response(payload)


class DeleteFutureView(APIView):
    """Deletes an owner's entries from today on and deactivates the owner."""

    def post(self, request, source_id: str):
        record = (
            RecurringObligation.objects.filter(pk=source_id).first()
            or InstallmentPurchase.objects.filter(pk=source_id).first()
        )
        if record is None:
            raise Http404
        removed = materializer.delete_future(DjangoLedgerRepository(), record.to_domain(), today=dt.date.today())
        return Response({"source_id": source_id, "removed": removed, "is_active": False})


class RequiredPaymentView(APIView):
    parser_classes = [JSONParser, FormParser]

    def post(self, request):
        serializer = RequiredPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            result = annuity.plan_contribution(data["target"], data["annual_rate"], data["months"])
        except FinPlanError as exc:
            return _engine_error(exc)
        return Response(
            {
                "monthly_payment": round(result.monthly_payment, 2),
                "total_contributed": round(result.total_contributed, 2),
                "total_interest": round(result.total_interest, 2),
                "months": result.months,
            }
        )


class GrowthSimulationView(APIView):
    parser_classes = [JSONParser, FormParser]

    def post(self, request):
        serializer = GrowthRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = growth.simulate_growth(GrowthConfig(**serializer.validated_data))
        except FinPlanError as exc:
            return _engine_error(exc)
        return Response(
            {
                "samples": [
                    {"year": s.year, "balance": round(s.balance, 2), "total_contributed": round(s.total_contributed, 2)}
                    for s in result.samples
                ],
                "final_amount": round(result.final_amount, 2),
                "total_contributed": round(result.total_contributed, 2),
                "total_interest": round(result.total_interest, 2),
            }
        )


class PatrimonyEvolutionView(APIView):
    def get(self, request):
        serializer = PatrimonyQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            investments = [row.to_domain() for row in Investment.objects.all()]
            events = [row.to_domain() for row in InvestmentEvent.objects.all()]
            assets = [row.to_domain() for row in PatrimonyAsset.objects.all()]

            points = patrimony.reconstruct(
                investments, events, assets, Granularity(data["granularity"]), now=data.get("as_of")
            )
            summary = patrimony.summarize(investments, assets)
        except FinPlanError as exc:
            return _engine_error(exc)
        return Response(
            {
                "summary": {
                    "total_assets": str(summary.total_assets),
                    "total_investments": str(summary.total_investments),
                    "total": str(summary.total),
                    "average_rate": summary.average_rate,
                },
                "points": [
                    {
                        "label": p.label,
                        "assets_value": str(p.assets_value),
                        "investments_value": str(p.investments_value),
                        "total": str(p.total),
                    }
                    for p in points
                ],
            }
        )
