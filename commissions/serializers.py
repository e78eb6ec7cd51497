from rest_framework import serializers

from users.serializers import UserLiteSerializer

from .models import Commission


class CommissionSerializer(serializers.ModelSerializer):
    agent = UserLiteSerializer(read_only=True)
    booking_reference = serializers.CharField(source="booking.reference", read_only=True)

    class Meta:
        model = Commission
        fields = (
            "id",
            "reference",
            "agent",
            "booking",
            "booking_reference",
            "booking_amount",
            "commission_rate",
            "commission_amount",
            "tier",
            "bonus_amount",
            "total_earning",
            "status",
            "approved_by",
            "approved_at",
            "paid_at",
            "paid_by",
            "payment_method",
            "transaction_reference",
            "rejection_reason",
            "month",
            "year",
            "notes",
            "created_at",
        )
        read_only_fields = fields


class CommissionPaymentSerializer(serializers.Serializer):
    payment_method = serializers.CharField(max_length=50)
    transaction_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class CommissionReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
