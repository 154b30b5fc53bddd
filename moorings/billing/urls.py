"""
URL configuration for the billing API.

Routes (under /api/v1/billing/):
- promo-codes/validate/   - Validate a promo code and preview the price
- checkout/               - Start a premium checkout
- confirm/                - Confirm a subscription after payment
- cancel/                 - Cancel at period end
- subscription/           - Current subscription state
- webhook/                - Stripe webhook receiver
"""

from django.urls import path

from moorings.billing.views import CancelSubscriptionView
from moorings.billing.views import CheckoutView
from moorings.billing.views import ConfirmSubscriptionView
from moorings.billing.views import PromoCodeValidateView
from moorings.billing.views import StripeWebhookView
from moorings.billing.views import SubscriptionStatusView

app_name = "billing"

urlpatterns = [
    path(
        "promo-codes/validate/",
        PromoCodeValidateView.as_view(),
        name="promo-validate",
    ),
    path(
        "checkout/",
        CheckoutView.as_view(),
        name="checkout",
    ),
    path(
        "confirm/",
        ConfirmSubscriptionView.as_view(),
        name="confirm",
    ),
    path(
        "cancel/",
        CancelSubscriptionView.as_view(),
        name="cancel",
    ),
    path(
        "subscription/",
        SubscriptionStatusView.as_view(),
        name="subscription",
    ),
    path(
        "webhook/",
        StripeWebhookView.as_view(),
        name="webhook",
    ),
]
