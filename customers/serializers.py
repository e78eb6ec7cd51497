from rest_framework import serializers

from users.serializers import UserLiteSerializer

from .models import Customer


class CustomerLiteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ("id", "first_name", "last_name", "email", "phone")


class CustomerSerializer(serializers.ModelSerializer):
    agent = UserLiteSerializer(read_only=True)

    class Meta:
        model = Customer
        fields = (
            "id", "agent", "first_name", "last_name", "email", "phone",
            "alternate_phone", "date_of_birth", "gender", "city", "country",
            "passport_number", "notes", "tags", "total_trips", "total_spent",
            "loyalty_points", "is_active", "created_at", "updated_at",
        )
        read_only_fields = ("total_trips", "total_spent", "loyalty_points", "created_at", "updated_at")

    def validate_email(self, value):
        request = self.context.get("request")
        agent = self.instance.agent if self.instance else getattr(request, "user", None)
        qs = Customer.objects.filter(email__iexact=value, agent=agent)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("You already have a customer with this email.")
        return value.lower()
