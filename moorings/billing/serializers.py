from rest_framework import serializers

from moorings.billing.constants import DiscountType
from moorings.billing.models import PromoCode


class PromoCodeRequestSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50, trim_whitespace=True)


class CheckoutRequestSerializer(serializers.Serializer):
    promo_code = serializers.CharField(
        max_length=50,
        required=False,
        allow_blank=True,
        default="",
    )


class ConfirmSubscriptionSerializer(serializers.Serializer):
    subscription_id = serializers.CharField(max_length=255)


class PriceQuoteSerializer(serializers.Serializer):
    """Display view of a PriceQuote; amounts are rounded to cents."""

    base_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    discount_amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        source="display_discount_amount",
    )
    final_price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        source="display_final_price",
    )
    is_full_discount = serializers.BooleanField()


class PromoCodeSerializer(serializers.ModelSerializer[PromoCode]):
    class Meta:
        model = PromoCode
        fields = [
            "id",
            "code",
            "description",
            "discount_type",
            "discount_value",
            "max_uses",
            "current_uses",
            "expires_at",
            "is_active",
            "created",
        ]
        read_only_fields = fields


class PromoCodeCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    discount_type = serializers.ChoiceField(
        choices=DiscountType.choices,
        default=DiscountType.PERCENTAGE,
    )
    discount_value = serializers.DecimalField(max_digits=10, decimal_places=2)
    max_uses = serializers.IntegerField(required=False, allow_null=True, default=None)
    expires_at = serializers.DateTimeField(required=False, allow_null=True, default=None)
    is_active = serializers.BooleanField(required=False, default=True)
