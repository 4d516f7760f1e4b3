from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from finplan_core.domain.models import Frequency, Granularity, ObligationKind

from .models import InstallmentPurchase, LedgerEntry, RecurringObligation


class ScheduleSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    frequency = serializers.ChoiceField(choices=[f.value for f in Frequency], default=Frequency.MONTHLY.value)
    horizon_cap = serializers.IntegerField(min_value=1, max_value=366, default=12)

    def validate(self, attrs):
        end = attrs.get("end_date")
        if end is not None and end < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "must not be before start_date"})
        return attrs


class RecurringObligationRequestSerializer(ScheduleSerializer):
    category = serializers.CharField(max_length=120)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    kind = serializers.ChoiceField(choices=[k.value for k in ObligationKind], default=ObligationKind.EXPENSE.value)


class InstallmentPurchaseRequestSerializer(serializers.Serializer):
    category = serializers.CharField(max_length=120)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    total_installments = serializers.IntegerField(min_value=1, max_value=480)
    start_date = serializers.DateField()


class RequiredPaymentSerializer(serializers.Serializer):
    target = serializers.FloatField(min_value=0.01)
    annual_rate = serializers.FloatField(min_value=0.0001)
    months = serializers.IntegerField(min_value=1)


class GrowthRequestSerializer(serializers.Serializer):
    initial = serializers.FloatField(min_value=0.0, default=0.0)
    monthly_contribution = serializers.FloatField(min_value=0.0, default=0.0)
    annual_rate = serializers.FloatField(default=0.0)
    years = serializers.IntegerField(min_value=0, max_value=100, default=1)


class PatrimonyQuerySerializer(serializers.Serializer):
    granularity = serializers.ChoiceField(choices=[g.value for g in Granularity], default=Granularity.MONTHLY.value)
    as_of = serializers.DateField(required=False)


class RecurringObligationSerializer(serializers.ModelSerializer):
    class Meta:
        model = RecurringObligation
        fields = [
            "id",
            "created_at",
            "category",
            "description",
            "amount",
            "kind",
            "frequency",
            "start_date",
            "end_date",
            "horizon_cap",
            "is_active",
            "status",
            "error",
        ]


class InstallmentPurchaseSerializer(serializers.ModelSerializer):
    class Meta:
        model = InstallmentPurchase
        fields = [
            "id",
            "created_at",
            "category",
            "description",
            "total_amount",
            "installment_amount",
            "total_installments",
            "paid_installments",
            "start_date",
            "is_active",
            "status",
            "error",
        ]


class LedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerEntry
        fields = ["id", "type", "category", "amount", "date", "description", "source_type", "source_id"]
