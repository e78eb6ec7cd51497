from rest_framework import serializers

from customers.models import Customer
from customers.serializers import CustomerLiteSerializer
from users.serializers import UserLiteSerializer

from .models import Booking, BookingStatusChange


class BookingStatusChangeSerializer(serializers.ModelSerializer):
    changed_by = UserLiteSerializer(read_only=True)

    class Meta:
        model = BookingStatusChange
        fields = ("status", "changed_at", "changed_by", "reason", "notes")


class BookingReadSerializer(serializers.ModelSerializer):
    agent = UserLiteSerializer(read_only=True)
    customer = CustomerLiteSerializer(read_only=True)

    class Meta:
        model = Booking
        fields = (
            "id",
            "reference",
            "agent",
            "customer",
            "booking_type",
            "title",
            "trip_type",
            "origin",
            "destination",
            "start_date",
            "end_date",
            "number_of_nights",
            "adults",
            "children",
            "infants",
            "base_price",
            "taxes",
            "service_charge",
            "discount",
            "total_amount",
            "currency",
            "status",
            "payment_status",
            "amount_paid",
            "amount_due",
            "priority",
            "created_at",
        )
        read_only_fields = fields


class BookingDetailSerializer(BookingReadSerializer):
    status_history = BookingStatusChangeSerializer(many=True, read_only=True)

    class Meta(BookingReadSerializer.Meta):
        fields = BookingReadSerializer.Meta.fields + (
            "description",
            "discount_reason",
            "amount_refunded",
            "tags",
            "special_requests",
            "internal_notes",
            "cancelled_at",
            "cancelled_by",
            "cancellation_reason",
            "status_history",
            "updated_at",
        )
        read_only_fields = fields


class BookingWriteSerializer(serializers.ModelSerializer):
    """
    Input for create and partial update. Validation stops at field shapes;
    ownership, conflicts and state rules are enforced by the booking services.
    """

    customer = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.all())
    status = serializers.ChoiceField(
        choices=[Booking.Status.DRAFT, Booking.Status.PENDING], required=False
    )

    class Meta:
        model = Booking
        fields = (
            "customer",
            "status",
            "booking_type",
            "title",
            "description",
            "trip_type",
            "origin",
            "destination",
            "start_date",
            "end_date",
            "adults",
            "children",
            "infants",
            "base_price",
            "taxes",
            "service_charge",
            "discount",
            "discount_reason",
            "currency",
            "priority",
            "tags",
            "special_requests",
            "internal_notes",
        )

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date must be on or after start date."})
        return attrs


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.Status.choices)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ConflictQuerySerializer(serializers.Serializer):
    customer = serializers.IntegerField()
    destination = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    exclude_booking = serializers.IntegerField(required=False)
