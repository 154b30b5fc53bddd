from django.apps import AppConfig


class BillingConfig(AppConfig):
    """
    Django app configuration for the billing app.

    Handles promo codes, premium pricing, the Stripe subscription lifecycle
    and its webhooks.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "moorings.billing"
