"""
Billing API views.

Views in this module:
- PromoCodeValidateView: check a promo code and preview the discounted price
- CheckoutView: start a premium checkout (or grant a full-discount upgrade)
- ConfirmSubscriptionView: client-reported payment success
- CancelSubscriptionView: cancel at period end
- SubscriptionStatusView: derived lifecycle state
- StripeWebhookView: signature-verified provider events
- AdminPromoCodeViewSet: promo code management for platform admins

Every decision is delegated to the lifecycle manager, the promo engine and
the pricing calculator. Domain errors are rendered by
``moorings.core.api.exceptions.api_exception_handler``.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import inline_serializer
from rest_framework import mixins
from rest_framework import serializers
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from moorings.billing.lifecycle import SubscriptionLifecycleManager
from moorings.billing.models import PromoCode
from moorings.billing.pricing import quote_premium
from moorings.billing.promos import create_promo_code
from moorings.billing.promos import deactivate_promo_code
from moorings.billing.promos import validate_promo_code
from moorings.billing.providers import get_billing_provider
from moorings.billing.serializers import CheckoutRequestSerializer
from moorings.billing.serializers import ConfirmSubscriptionSerializer
from moorings.billing.serializers import PriceQuoteSerializer
from moorings.billing.serializers import PromoCodeCreateSerializer
from moorings.billing.serializers import PromoCodeRequestSerializer
from moorings.billing.serializers import PromoCodeSerializer
from moorings.core.permissions import IsPlatformAdmin

logger = logging.getLogger(__name__)


def get_lifecycle_manager() -> SubscriptionLifecycleManager:
    return SubscriptionLifecycleManager(get_billing_provider())


def _subscription_payload(subscription_status: str, *, expires_at) -> dict:
    return {
        "subscription_status": subscription_status,
        "expires_at": expires_at.isoformat() if expires_at else None,
    }


class PromoCodeValidateView(APIView):
    """Validate a promo code and show what the user would pay today."""

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Validate a promo code",
        request=PromoCodeRequestSerializer,
        responses={
            200: inline_serializer(
                name="PromoCodeValidateResponse",
                fields={
                    "valid": serializers.BooleanField(),
                    "code": serializers.CharField(),
                    "discount_type": serializers.CharField(),
                    "discount_value": serializers.DecimalField(
                        max_digits=10,
                        decimal_places=2,
                    ),
                    "price": PriceQuoteSerializer(),
                },
            ),
            400: {"description": "Promo code missing, invalid, inactive, expired or used up."},
        },
        tags=["Billing"],
    )
    def post(self, request):
        serializer = PromoCodeRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        promo = validate_promo_code(serializer.validated_data["code"]).raise_if_rejected()
        quote = quote_premium(promo)
        return Response(
            {
                "valid": True,
                "code": promo.code,
                "discount_type": promo.discount_type,
                "discount_value": str(promo.discount_value),
                "price": PriceQuoteSerializer(quote).data,
            },
            status=status.HTTP_200_OK,
        )


class CheckoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Start a premium checkout",
        request=CheckoutRequestSerializer,
        responses={
            200: inline_serializer(
                name="CheckoutResponse",
                fields={
                    "state": serializers.CharField(),
                    "free_upgrade": serializers.BooleanField(),
                    "subscription_id": serializers.CharField(allow_null=True),
                    "client_secret": serializers.CharField(allow_null=True),
                    "expires_at": serializers.DateTimeField(allow_null=True),
                    "promo_code": serializers.CharField(allow_null=True),
                    "price": PriceQuoteSerializer(),
                    "message": serializers.CharField(),
                },
            ),
            400: {"description": "Promo code rejected."},
            409: {"description": "Already premium, or promo usage limit reached."},
            502: {"description": "Payment provider failure; nothing was changed."},
        },
        tags=["Billing"],
    )
    def post(self, request):
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = get_lifecycle_manager().start_checkout(
            request.user,
            promo_code=serializer.validated_data["promo_code"] or None,
        )
        return Response(
            {
                "state": result.state,
                "free_upgrade": result.free_upgrade,
                "subscription_id": result.subscription_id,
                "client_secret": result.client_secret,
                "expires_at": result.expires_at.isoformat() if result.expires_at else None,
                "promo_code": result.promo_code,
                "price": PriceQuoteSerializer(result.quote).data,
                "message": result.message,
            },
            status=status.HTTP_200_OK,
        )


class ConfirmSubscriptionView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Confirm a subscription after payment",
        request=ConfirmSubscriptionSerializer,
        tags=["Billing"],
    )
    def post(self, request):
        serializer = ConfirmSubscriptionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = get_lifecycle_manager().confirm_subscription(
            request.user,
            serializer.validated_data["subscription_id"],
        )
        request.user.refresh_from_db()
        return Response(
            {
                "applied": result.applied,
                **_subscription_payload(
                    request.user.subscription_status,
                    expires_at=request.user.subscription_expires_at,
                ),
            },
            status=status.HTTP_200_OK,
        )


class CancelSubscriptionView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Cancel premium at the end of the billing period",
        request=None,
        tags=["Billing"],
    )
    def post(self, request):
        result = get_lifecycle_manager().cancel_subscription(request.user)
        return Response(
            {
                "state": result.state,
                "subscription_id": result.subscription_id,
                "access_until": result.access_until.isoformat()
                if result.access_until
                else None,
                "message": result.message,
            },
            status=status.HTTP_200_OK,
        )


class SubscriptionStatusView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Get subscription status", tags=["Billing"])
    def get(self, request):
        result = get_lifecycle_manager().get_status(request.user)
        return Response(
            {
                "state": result.state,
                "is_premium": result.is_premium,
                "cancel_at_period_end": result.cancel_at_period_end,
                **_subscription_payload(
                    request.user.subscription_status,
                    expires_at=result.expires_at,
                ),
            },
            status=status.HTTP_200_OK,
        )


class StripeWebhookView(APIView):
    """
    Receive Stripe events. Authentication is the Stripe signature header, so
    DRF authentication (and with it CSRF enforcement) is disabled here.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(exclude=True)
    def post(self, request):
        signature = request.META.get("HTTP_STRIPE_SIGNATURE", "")
        result = get_lifecycle_manager().handle_webhook(request.body, signature)
        return Response(
            {"received": True, "applied": result.applied, "reason": result.reason},
            status=status.HTTP_200_OK,
        )


@extend_schema(tags=["Admin"])
class AdminPromoCodeViewSet(mixins.ListModelMixin, GenericViewSet):
    serializer_class = PromoCodeSerializer
    permission_classes = [IsPlatformAdmin]
    queryset = PromoCode.objects.all()
    lookup_value_regex = r"\d+"

    @extend_schema(request=PromoCodeCreateSerializer, responses={201: PromoCodeSerializer})
    def create(self, request):
        serializer = PromoCodeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        promo = create_promo_code(**serializer.validated_data)
        return Response(PromoCodeSerializer(promo).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: PromoCodeSerializer})
    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        promo = deactivate_promo_code(int(pk))
        return Response(PromoCodeSerializer(promo).data, status=status.HTTP_200_OK)
