from rest_framework import serializers

from moorings.billing.entitlements import get_subscription_state
from moorings.billing.entitlements import has_premium_access
from moorings.users.models import User


class UserSerializer(serializers.ModelSerializer[User]):
    """
    Serializer for the User model.

    ``subscription_state`` and ``is_premium`` are derived at read time so a
    lapsed expiry shows as free even before any webhook arrives.
    """

    subscription_state = serializers.SerializerMethodField()
    is_premium = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "name",
            "role",
            "subscription_status",
            "subscription_expires_at",
            "subscription_state",
            "is_premium",
        ]
        read_only_fields = fields

    def get_subscription_state(self, obj: User) -> str:
        return get_subscription_state(obj)

    def get_is_premium(self, obj: User) -> bool:
        return has_premium_access(obj)
