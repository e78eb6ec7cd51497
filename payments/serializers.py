from rest_framework import serializers

from booking.models import ZERO
from users.serializers import UserLiteSerializer

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    booking_reference = serializers.CharField(source="booking.reference", read_only=True)
    processed_by = UserLiteSerializer(read_only=True)

    class Meta:
        model = Payment
        fields = (
            "id",
            "transaction_id",
            "booking",
            "booking_reference",
            "agent",
            "customer",
            "amount",
            "currency",
            "method",
            "payment_type",
            "status",
            "gateway",
            "gateway_response",
            "receipt_number",
            "receipt_generated_at",
            "refund_of",
            "original_transaction_id",
            "refund_reason",
            "refunded_at",
            "notes",
            "processed_by",
            "created_at",
        )
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    booking = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=ZERO)
    method = serializers.ChoiceField(choices=Payment.Method.choices)
    source = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_amount(self, value):
        if value <= ZERO:
            raise serializers.ValidationError("Amount must be greater than zero.")
        return value


class RefundSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
