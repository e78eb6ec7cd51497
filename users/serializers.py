from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


def _avatar_url(obj):
    avatar = getattr(obj, "avatar", None)
    if not avatar:
        return None
    try:
        return avatar.url
    except Exception:
        return None


class UserLiteSerializer(serializers.ModelSerializer):
    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "username", "first_name", "last_name", "avatar_url")

    def get_avatar_url(self, obj):
        return _avatar_url(obj)


class AgentDetailSerializer(serializers.ModelSerializer):
    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            "id", "username", "email", "first_name", "last_name", "phone",
            "agency_name", "agency_license", "role", "commission_rate",
            "total_bookings", "total_earnings", "avatar_url",
        )
        read_only_fields = ("role", "commission_rate", "total_bookings", "total_earnings")

    def get_avatar_url(self, obj):
        return _avatar_url(obj)
