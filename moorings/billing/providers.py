"""
Billing provider abstraction and the Stripe implementation.

The lifecycle manager only talks to ``BillingProvider``. The Stripe provider
is built from explicit configuration (see ``get_billing_provider``) and passes
its API key on every call; nothing here sets ``stripe.api_key`` globally.

Every ``stripe.StripeError`` is re-raised as ``ExternalProviderError`` so
callers can roll back and let the user retry.

To test webhooks locally:
    stripe listen --forward-to localhost:8000/api/v1/billing/webhook/
"""

from __future__ import annotations

import contextlib
import logging
from abc import ABC
from abc import abstractmethod
from dataclasses import dataclass
from datetime import UTC
from datetime import datetime
from typing import Any

import stripe
from django.conf import settings
from django.core.cache import cache
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import model_validator

from moorings.billing.constants import BILLING_INTERVAL
from moorings.billing.constants import PROVIDER_ACTIVE_STATUSES
from moorings.billing.errors import ExternalProviderError
from moorings.billing.errors import SignatureVerificationError

logger = logging.getLogger(__name__)

PRODUCT_CACHE_PREFIX = "moorings:billing:stripe_product"
PRODUCT_CACHE_TIMEOUT = 60 * 60 * 24


def _from_timestamp(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=UTC)


@dataclass(frozen=True)
class ProviderSubscription:
    """Provider-side view of a subscription, normalised for the lifecycle."""

    subscription_id: str
    customer_id: str
    status: str
    current_period_end: datetime | None = None
    cancel_at_period_end: bool = False
    client_secret: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status in PROVIDER_ACTIVE_STATUSES


class WebhookSubscription(BaseModel):
    """The ``data.object`` of a customer.subscription.* event."""

    model_config = ConfigDict(extra="ignore")

    id: str
    customer: str
    status: str
    current_period_end: int | None = None
    cancel_at_period_end: bool = False

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        customer = data.get("customer")
        if isinstance(customer, dict):
            data["customer"] = customer.get("id")
        if data.get("current_period_end") is None:
            # Newer API versions report the period on subscription items.
            items = (data.get("items") or {}).get("data") or []
            if items:
                data["current_period_end"] = items[0].get("current_period_end")
        return data

    def to_provider_subscription(self) -> ProviderSubscription:
        return ProviderSubscription(
            subscription_id=self.id,
            customer_id=self.customer,
            status=self.status,
            current_period_end=_from_timestamp(self.current_period_end),
            cancel_at_period_end=self.cancel_at_period_end,
        )


class WebhookEventData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    object: dict[str, Any] = Field(default_factory=dict)


class WebhookEvent(BaseModel):
    """Signature-verified provider event."""

    model_config = ConfigDict(extra="ignore")

    id: str
    type: str
    data: WebhookEventData = Field(default_factory=WebhookEventData)

    def subscription(self) -> ProviderSubscription:
        return WebhookSubscription.model_validate(
            self.data.object,
        ).to_provider_subscription()


class BillingProvider(ABC):
    """Operations the subscription lifecycle needs from a payment provider."""

    @abstractmethod
    def create_customer(self, *, email: str, name: str, user_id: int) -> str:
        """Create a customer and return its provider id."""

    @abstractmethod
    def create_subscription(
        self,
        customer_id: str,
        *,
        amount_minor: int,
        metadata: dict[str, str],
        trial_days: int = 0,
    ) -> ProviderSubscription:
        """Create a yearly subscription charging ``amount_minor``."""

    @abstractmethod
    def cancel_at_period_end(self, subscription_id: str) -> ProviderSubscription:
        """Schedule cancellation at the end of the current period."""

    @abstractmethod
    def get_subscription(self, subscription_id: str) -> ProviderSubscription:
        """Fetch the authoritative state of a subscription."""

    @abstractmethod
    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify the signature and parse the event, or raise SignatureVerificationError."""


class StripeBillingProvider(BillingProvider):
    """
    Stripe-backed provider.

    Subscriptions use inline ``price_data`` on a single product, so each
    checkout charges exactly the discounted amount computed locally.
    """

    SUBSCRIPTION_EXPAND = ["latest_invoice.payment_intent"]

    def __init__(
        self,
        *,
        api_key: str,
        webhook_secret: str,
        currency: str,
        product_name: str,
        product_description: str = "",
        api_version: str | None = None,
    ):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.currency = currency
        self.product_name = product_name
        self.product_description = product_description
        self.api_version = api_version

    def _request_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {"api_key": self.api_key}
        if self.api_version:
            options["stripe_version"] = self.api_version
        return options

    @contextlib.contextmanager
    def _stripe_call(self, action: str):
        try:
            yield
        except stripe.StripeError as exc:
            logger.exception("Stripe error during %s", action)
            raise ExternalProviderError(
                f"Payment provider request failed: {action}.",
            ) from exc

    def create_customer(self, *, email: str, name: str, user_id: int) -> str:
        with self._stripe_call("create customer"):
            customer = stripe.Customer.create(
                email=email,
                name=name or email,
                metadata={"user_id": str(user_id)},
                **self._request_options(),
            )
        logger.info("Created Stripe customer %s for user_id=%s", customer.id, user_id)
        return customer.id

    def _product_cache_key(self) -> str:
        return f"{PRODUCT_CACHE_PREFIX}:{self.product_name}"

    def _get_or_create_product_id(self) -> str:
        cache_key = self._product_cache_key()
        product_id = cache.get(cache_key)
        if product_id:
            return product_id
        product_id = self._find_product_id() or self._create_product_id()
        cache.set(cache_key, product_id, timeout=PRODUCT_CACHE_TIMEOUT)
        return product_id

    def _find_product_id(self) -> str | None:
        with self._stripe_call("look up product"):
            products = stripe.Product.list(active=True, limit=100, **self._request_options())
            for product in products.auto_paging_iter():
                if product.name == self.product_name:
                    return product.id
        return None

    def _create_product_id(self) -> str:
        with self._stripe_call("create product"):
            params = {"name": self.product_name}
            if self.product_description:
                params["description"] = self.product_description
            product = stripe.Product.create(**params, **self._request_options())
        logger.info("Created Stripe product %s (%s)", product.id, self.product_name)
        return product.id

    def create_subscription(
        self,
        customer_id: str,
        *,
        amount_minor: int,
        metadata: dict[str, str],
        trial_days: int = 0,
    ) -> ProviderSubscription:
        product_id = self._get_or_create_product_id()
        params: dict[str, Any] = {
            "customer": customer_id,
            "items": [
                {
                    "price_data": {
                        "currency": self.currency,
                        "product": product_id,
                        "unit_amount": amount_minor,
                        "recurring": {"interval": BILLING_INTERVAL},
                    },
                },
            ],
            "payment_behavior": "default_incomplete",
            "payment_settings": {"save_default_payment_method": "on_subscription"},
            "expand": self.SUBSCRIPTION_EXPAND,
            "metadata": metadata,
        }
        if trial_days > 0:
            params["trial_period_days"] = trial_days

        with self._stripe_call("create subscription"):
            stripe_sub = stripe.Subscription.create(**params, **self._request_options())
        logger.info(
            "Created Stripe subscription %s for customer %s (amount=%s %s)",
            stripe_sub.id,
            customer_id,
            amount_minor,
            self.currency,
        )
        return self._to_provider_subscription(stripe_sub)

    def cancel_at_period_end(self, subscription_id: str) -> ProviderSubscription:
        with self._stripe_call("cancel subscription"):
            stripe_sub = stripe.Subscription.modify(
                subscription_id,
                cancel_at_period_end=True,
                **self._request_options(),
            )
        logger.info("Scheduled cancellation of Stripe subscription %s", subscription_id)
        return self._to_provider_subscription(stripe_sub)

    def get_subscription(self, subscription_id: str) -> ProviderSubscription:
        with self._stripe_call("retrieve subscription"):
            stripe_sub = stripe.Subscription.retrieve(
                subscription_id,
                **self._request_options(),
            )
        return self._to_provider_subscription(stripe_sub)

    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent:
        if not self.webhook_secret:
            logger.error("STRIPE_WEBHOOK_SECRET is not configured")
            raise SignatureVerificationError("Webhook secret not configured.")
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            logger.warning("Rejected Stripe webhook: %s", exc)
            raise SignatureVerificationError() from exc
        return WebhookEvent.model_validate_json(payload)

    @staticmethod
    def _client_secret(stripe_sub) -> str | None:
        invoice = getattr(stripe_sub, "latest_invoice", None)
        if invoice is None or isinstance(invoice, str):
            return None
        payment_intent = getattr(invoice, "payment_intent", None)
        if payment_intent is not None and not isinstance(payment_intent, str):
            return getattr(payment_intent, "client_secret", None)
        confirmation = getattr(invoice, "confirmation_secret", None)
        if confirmation is not None:
            return getattr(confirmation, "client_secret", None)
        return None

    @staticmethod
    def _period_end(stripe_sub) -> datetime | None:
        period_end = getattr(stripe_sub, "current_period_end", None)
        if period_end is None:
            # ``items`` clashes with the mapping method, so index it.
            with contextlib.suppress(KeyError):
                data = stripe_sub["items"]["data"] or []
                if data:
                    period_end = getattr(data[0], "current_period_end", None)
        return _from_timestamp(period_end)

    def _to_provider_subscription(self, stripe_sub) -> ProviderSubscription:
        customer = stripe_sub.customer
        return ProviderSubscription(
            subscription_id=stripe_sub.id,
            customer_id=customer if isinstance(customer, str) else customer.id,
            status=stripe_sub.status,
            current_period_end=self._period_end(stripe_sub),
            cancel_at_period_end=bool(
                getattr(stripe_sub, "cancel_at_period_end", False),
            ),
            client_secret=self._client_secret(stripe_sub),
        )


def get_billing_provider() -> BillingProvider:
    """Build the Stripe provider from Django settings."""
    return StripeBillingProvider(
        api_key=settings.STRIPE_SECRET_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        currency=settings.BILLING_CURRENCY,
        product_name=settings.PREMIUM_PRODUCT_NAME,
        product_description=settings.PREMIUM_PRODUCT_DESCRIPTION,
        api_version=settings.STRIPE_API_VERSION,
    )
