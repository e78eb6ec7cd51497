from rest_framework import serializers

from booking.models import Booking
from users.serializers import UserLiteSerializer

from .models import Lead


class LeadSerializer(serializers.ModelSerializer):
    agent = UserLiteSerializer(read_only=True)
    converted_booking_reference = serializers.CharField(
        source="converted_to_booking.reference", read_only=True, allow_null=True
    )

    class Meta:
        model = Lead
        fields = (
            "id",
            "reference",
            "agent",
            "first_name",
            "last_name",
            "email",
            "phone",
            "city",
            "country",
            "destination",
            "trip_type",
            "start_date",
            "end_date",
            "adults",
            "children",
            "infants",
            "budget_min",
            "budget_max",
            "special_requirements",
            "source",
            "status",
            "priority",
            "converted_to_booking",
            "converted_booking_reference",
            "converted_to_customer",
            "converted_at",
            "lost_reason",
            "lost_at",
            "notes",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class LeadWriteSerializer(serializers.ModelSerializer):
    status = serializers.ChoiceField(choices=sorted(Lead.EDITABLE_STATUSES), required=False)

    class Meta:
        model = Lead
        fields = (
            "first_name",
            "last_name",
            "email",
            "phone",
            "city",
            "country",
            "destination",
            "trip_type",
            "start_date",
            "end_date",
            "adults",
            "children",
            "infants",
            "budget_min",
            "budget_max",
            "special_requirements",
            "source",
            "status",
            "priority",
            "lost_reason",
            "notes",
        )

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date must be on or after start date."})
        low = attrs.get("budget_min", getattr(self.instance, "budget_min", None))
        high = attrs.get("budget_max", getattr(self.instance, "budget_max", None))
        if low is not None and high is not None and high < low:
            raise serializers.ValidationError({"budget_max": "Maximum budget must not be below the minimum."})
        return attrs


class LeadConversionSerializer(serializers.ModelSerializer):
    """Booking fields that override what the lead already carries. Everything is optional."""

    status = serializers.ChoiceField(choices=[Booking.Status.DRAFT, Booking.Status.PENDING], required=False)

    class Meta:
        model = Booking
        fields = (
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
            "special_requests",
            "internal_notes",
        )
        extra_kwargs = {name: {"required": False} for name in fields}
