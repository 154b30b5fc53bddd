"""
Subscription lifecycle for the annual premium plan.

States (see ``SubscriptionState``):
- free → premium: full-discount promo, no provider subscription involved
- free → pending: checkout created a provider subscription awaiting payment
- pending → premium: client confirmation or webhook reports active/trialing
- premium → cancel_scheduled: provider told to cancel at period end
- premium | cancel_scheduled → free: deletion webhook, or expiry passing

Key design decisions:
- Client confirmation, webhooks and reconciliation all feed one transition,
  ``apply_provider_subscription``. It always writes the provider's period end
  (never adds to it), so repeated or reordered deliveries converge.
- Local state is only written after the provider call succeeded. The
  provider customer id is saved as soon as the customer exists, so retries
  reuse it. Checkout then redeems the promo and creates the subscription in
  one short transaction, so a provider failure rolls the redemption back.
- The provider is passed in explicitly; the manager holds no global client.

Usage:
    manager = SubscriptionLifecycleManager(get_billing_provider())
    result = manager.start_checkout(user, promo_code="SUMMER10")
    if result.free_upgrade:
        ...  # premium granted, nothing to pay
    else:
        ...  # hand result.client_secret to the payment form
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from django.db import transaction
from django.utils import timezone
from pydantic import ValidationError as PydanticValidationError

from moorings.billing.constants import SubscriptionState
from moorings.billing.constants import SubscriptionStatus
from moorings.billing.constants import add_one_year
from moorings.billing.entitlements import get_subscription_state
from moorings.billing.entitlements import has_premium_access
from moorings.billing.entitlements import is_premium
from moorings.billing.entitlements import is_subscription_expired
from moorings.billing.errors import BillingValidationError
from moorings.billing.errors import ConflictError
from moorings.billing.errors import ExternalProviderError
from moorings.billing.errors import NotFoundError
from moorings.billing.pricing import PriceQuote
from moorings.billing.pricing import quote_premium
from moorings.billing.promos import record_redemption
from moorings.billing.promos import validate_promo_code
from moorings.billing.webhooks import dispatch_event
from moorings.core.site_settings import get_pricing_settings
from moorings.users.models import User

if TYPE_CHECKING:
    from moorings.billing.models import PromoCode
    from moorings.billing.providers import BillingProvider
    from moorings.billing.providers import ProviderSubscription

logger = logging.getLogger(__name__)

# Stripe never returns a paid subscription to this status
PRE_PAYMENT_STATUSES = frozenset({"incomplete"})


@dataclass
class CheckoutResult:
    """Result of starting a checkout."""

    state: str
    quote: PriceQuote
    promo_code: str | None = None
    subscription_id: str | None = None
    client_secret: str | None = None
    expires_at: datetime | None = None
    free_upgrade: bool = False
    message: str = ""


@dataclass
class TransitionResult:
    """Result of applying provider state to a user."""

    applied: bool
    user_id: int | None = None
    status: str | None = None
    expires_at: datetime | None = None
    reason: str = ""


@dataclass
class CancellationResult:
    subscription_id: str
    access_until: datetime | None
    state: str = SubscriptionState.CANCEL_SCHEDULED
    message: str = ""


@dataclass
class SubscriptionStatusResult:
    state: str
    is_premium: bool
    expires_at: datetime | None
    cancel_at_period_end: bool = False
    provider_checked: bool = False


class SubscriptionLifecycleManager:
    """
    Orchestrates checkout, confirmation, cancellation and webhook handling
    for one billing provider.
    """

    def __init__(self, provider: BillingProvider):
        self.provider = provider

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def start_checkout(
        self,
        user: User,
        promo_code: str | None = None,
        now: datetime | None = None,
    ) -> CheckoutResult:
        """
        Price the premium plan for ``user`` and start paying for it.

        A 100% promo grants premium for one year on the spot. Anything else
        creates a provider subscription and leaves the user pending until
        payment is confirmed.
        """
        now = now or timezone.now()
        if has_premium_access(user, now):
            raise ConflictError(
                "You already have an active premium subscription.",
                code="already_premium",
            )

        promo = None
        if promo_code and promo_code.strip():
            promo = validate_promo_code(promo_code, now).raise_if_rejected()

        quote = quote_premium(promo)
        if quote.is_full_discount:
            return self._grant_full_discount(user, promo, quote, now)
        return self._start_provider_checkout(user, promo, quote)

    def _grant_full_discount(
        self,
        user: User,
        promo: PromoCode,
        quote: PriceQuote,
        now: datetime,
    ) -> CheckoutResult:
        expires_at = add_one_year(now)
        with transaction.atomic():
            locked = User.objects.select_for_update().get(pk=user.pk)
            if has_premium_access(locked, now):
                raise ConflictError(
                    "You already have an active premium subscription.",
                    code="already_premium",
                )
            record_redemption(promo.pk)
            User.objects.update_subscription(
                user.pk,
                SubscriptionStatus.PREMIUM,
                expires_at,
            )
            # An abandoned checkout's subscription must not act on this grant.
            User.objects.update_billing_refs(user.pk, subscription_id="")

        user.subscription_status = SubscriptionStatus.PREMIUM
        user.subscription_expires_at = expires_at
        user.stripe_subscription_id = ""
        logger.info(
            "Granted premium to user_id=%s via full-discount promo %s until %s",
            user.pk,
            promo.code,
            expires_at.isoformat(),
        )
        return CheckoutResult(
            state=SubscriptionState.PREMIUM,
            quote=quote,
            promo_code=promo.code,
            expires_at=expires_at,
            free_upgrade=True,
            message="Premium activated with your promo code.",
        )

    def _ensure_customer(self, user: User) -> str:
        """
        Return the user's provider customer, creating and saving it first if
        needed. Saved on its own so a failed checkout retry reuses it.
        """
        if user.stripe_customer_id:
            return user.stripe_customer_id
        customer_id = self.provider.create_customer(
            email=user.email,
            name=user.name,
            user_id=user.pk,
        )
        User.objects.update_billing_refs(user.pk, customer_id=customer_id)
        user.stripe_customer_id = customer_id
        return customer_id

    def _start_provider_checkout(
        self,
        user: User,
        promo: PromoCode | None,
        quote: PriceQuote,
    ) -> CheckoutResult:
        metadata = {
            "user_id": str(user.pk),
            "promo_code": promo.code if promo else "",
            "original_price": str(quote.base_price),
            "discount_amount": str(quote.display_discount_amount),
        }
        trial_days = get_pricing_settings().trial_days
        customer_id = self._ensure_customer(user)

        with transaction.atomic():
            if promo is not None:
                record_redemption(promo.pk)
            provider_sub = self.provider.create_subscription(
                customer_id,
                amount_minor=quote.charge_amount_minor,
                metadata=metadata,
                trial_days=trial_days,
            )
            User.objects.update_billing_refs(
                user.pk,
                subscription_id=provider_sub.subscription_id,
            )
            user.stripe_subscription_id = provider_sub.subscription_id

            state = SubscriptionState.PENDING
            expires_at = None
            if provider_sub.is_active:
                # Trials and zero-amount subscriptions start active.
                transition = self.apply_provider_subscription(provider_sub)
                if transition.status == SubscriptionStatus.PREMIUM:
                    state = SubscriptionState.PREMIUM
                    expires_at = transition.expires_at

        logger.info(
            "Started checkout for user_id=%s: subscription=%s amount=%s promo=%s",
            user.pk,
            provider_sub.subscription_id,
            quote.charge_amount,
            promo.code if promo else None,
        )
        return CheckoutResult(
            state=state,
            quote=quote,
            promo_code=promo.code if promo else None,
            subscription_id=provider_sub.subscription_id,
            client_secret=provider_sub.client_secret,
            expires_at=expires_at,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def confirm_subscription(self, user: User, subscription_id: str) -> TransitionResult:
        """
        Client-reported payment success. The provider is asked for the real
        state; the client's claim is never trusted on its own.
        """
        if not subscription_id:
            raise BillingValidationError(
                "Subscription ID is required",
                code="subscription_id_required",
            )
        if subscription_id != user.stripe_subscription_id:
            raise NotFoundError("Subscription not found", code="subscription_not_found")

        provider_sub = self.provider.get_subscription(subscription_id)
        if provider_sub.customer_id != user.stripe_customer_id:
            raise NotFoundError("Subscription not found", code="subscription_not_found")
        if not provider_sub.is_active:
            raise BillingValidationError(
                "Subscription is not active yet",
                code="subscription_not_active",
            )
        return self.apply_provider_subscription(provider_sub)

    def apply_provider_subscription(
        self,
        provider_sub: ProviderSubscription,
        *,
        deleted: bool = False,
    ) -> TransitionResult:
        """
        Converge the owning user onto the provider's view of a subscription.

        Safe to call any number of times with the same input. Events for a
        subscription other than the user's current one are ignored, as are
        events whose period end is older than the expiry already stored.
        """
        with transaction.atomic():
            user = self._lock_subscription_owner(provider_sub)
            if user is None:
                logger.info(
                    "Ignoring subscription %s: no user for customer %s",
                    provider_sub.subscription_id,
                    provider_sub.customer_id,
                )
                return TransitionResult(applied=False, reason="unknown_customer")

            current_id = user.stripe_subscription_id
            if current_id and current_id != provider_sub.subscription_id:
                logger.info(
                    "Ignoring subscription %s for user_id=%s: current is %s",
                    provider_sub.subscription_id,
                    user.pk,
                    current_id,
                )
                return TransitionResult(
                    applied=False,
                    user_id=user.pk,
                    reason="not_current_subscription",
                )
            if not current_id:
                if deleted or not provider_sub.is_active:
                    logger.info(
                        "Ignoring subscription %s for user_id=%s: no current subscription",
                        provider_sub.subscription_id,
                        user.pk,
                    )
                    return TransitionResult(
                        applied=False,
                        user_id=user.pk,
                        reason="no_current_subscription",
                    )
                User.objects.update_billing_refs(
                    user.pk,
                    subscription_id=provider_sub.subscription_id,
                )

            if deleted:
                return self._downgrade(user, provider_sub, clear_subscription=True)

            if self._is_stale(user, provider_sub):
                logger.info(
                    "Ignoring stale state for subscription %s (status=%s, period_end=%s)",
                    provider_sub.subscription_id,
                    provider_sub.status,
                    provider_sub.current_period_end,
                )
                return TransitionResult(
                    applied=False,
                    user_id=user.pk,
                    status=user.subscription_status,
                    expires_at=user.subscription_expires_at,
                    reason="stale",
                )

            if provider_sub.is_active:
                expires_at = provider_sub.current_period_end or user.subscription_expires_at
                User.objects.update_subscription(
                    user.pk,
                    SubscriptionStatus.PREMIUM,
                    expires_at,
                )
                logger.info(
                    "User user_id=%s premium via subscription %s until %s",
                    user.pk,
                    provider_sub.subscription_id,
                    expires_at,
                )
                return TransitionResult(
                    applied=True,
                    user_id=user.pk,
                    status=SubscriptionStatus.PREMIUM,
                    expires_at=expires_at,
                )

            return self._downgrade(user, provider_sub, clear_subscription=False)

    def _lock_subscription_owner(self, provider_sub: ProviderSubscription) -> User | None:
        locked = User.objects.select_for_update()
        user = locked.filter(stripe_subscription_id=provider_sub.subscription_id).first()
        if user is None and provider_sub.customer_id:
            user = locked.filter(stripe_customer_id=provider_sub.customer_id).first()
        return user

    @staticmethod
    def _is_stale(user: User, provider_sub: ProviderSubscription) -> bool:
        if not is_premium(user):
            return False
        if provider_sub.status in PRE_PAYMENT_STATUSES:
            return True
        stored = user.subscription_expires_at
        period_end = provider_sub.current_period_end
        return stored is not None and period_end is not None and period_end < stored

    def _downgrade(
        self,
        user: User,
        provider_sub: ProviderSubscription,
        *,
        clear_subscription: bool,
    ) -> TransitionResult:
        User.objects.update_subscription(user.pk, SubscriptionStatus.FREE, None)
        if clear_subscription:
            User.objects.update_billing_refs(user.pk, subscription_id="")
        logger.info(
            "User user_id=%s downgraded to free (subscription %s, status=%s)",
            user.pk,
            provider_sub.subscription_id,
            provider_sub.status,
        )
        return TransitionResult(
            applied=True,
            user_id=user.pk,
            status=SubscriptionStatus.FREE,
            expires_at=None,
        )

    def cancel_subscription(self, user: User) -> CancellationResult:
        """
        Ask the provider to cancel at period end. Nothing changes locally; the
        user keeps premium until the deletion webhook or their expiry.
        """
        if not user.stripe_subscription_id:
            raise NotFoundError(
                "No active subscription found",
                code="no_subscription",
            )
        if not has_premium_access(user):
            raise ConflictError(
                "Only active premium subscriptions can be cancelled.",
                code="not_premium",
            )

        provider_sub = self.provider.cancel_at_period_end(user.stripe_subscription_id)
        access_until = user.subscription_expires_at or provider_sub.current_period_end
        logger.info(
            "Cancellation scheduled for user_id=%s subscription %s, access until %s",
            user.pk,
            provider_sub.subscription_id,
            access_until,
        )
        message = "Your subscription will be cancelled at the end of the billing period."
        if access_until:
            message = (
                "Your subscription will be cancelled at the end of the billing "
                f"period. You retain premium access until {access_until:%Y-%m-%d}."
            )
        return CancellationResult(
            subscription_id=provider_sub.subscription_id,
            access_until=access_until,
            message=message,
        )

    # ------------------------------------------------------------------
    # Webhooks and reconciliation
    # ------------------------------------------------------------------

    def handle_webhook(self, payload: bytes, signature: str) -> TransitionResult:
        """
        Verify and apply one provider event. Raises SignatureVerificationError
        for unverifiable payloads; nothing is applied in that case.
        """
        try:
            event = self.provider.construct_webhook_event(payload, signature)
            return dispatch_event(self, event)
        except PydanticValidationError as exc:
            logger.warning("Malformed webhook payload: %s", exc)
            raise BillingValidationError(
                "Malformed webhook payload",
                code="malformed_webhook",
            ) from exc

    def reconcile(self, user: User, now: datetime | None = None) -> TransitionResult:
        """
        Re-read provider state and converge the local record onto it.

        Users without a provider subscription whose premium expiry has passed
        are downgraded, making lazy expiry persistent.
        """
        now = now or timezone.now()
        before = (user.subscription_status, user.subscription_expires_at)

        if user.stripe_subscription_id:
            provider_sub = self.provider.get_subscription(user.stripe_subscription_id)
            result = self.apply_provider_subscription(
                provider_sub,
                deleted=provider_sub.status == "canceled",
            )
        elif is_premium(user) and is_subscription_expired(user, now):
            User.objects.update_subscription(user.pk, SubscriptionStatus.FREE, None)
            result = TransitionResult(
                applied=True,
                user_id=user.pk,
                status=SubscriptionStatus.FREE,
            )
        else:
            return TransitionResult(applied=False, user_id=user.pk, reason="in_sync")

        user.refresh_from_db()
        after = (user.subscription_status, user.subscription_expires_at)
        if before != after:
            logger.warning(
                "Reconciled user_id=%s: %s/%s -> %s/%s",
                user.pk,
                before[0],
                before[1],
                after[0],
                after[1],
            )
        return result

    def get_status(self, user: User) -> SubscriptionStatusResult:
        """Current lifecycle state, asking the provider about pending cancellation."""
        cancel_at_period_end = False
        provider_checked = False
        if has_premium_access(user) and user.stripe_subscription_id:
            try:
                provider_sub = self.provider.get_subscription(user.stripe_subscription_id)
            except ExternalProviderError:
                logger.warning(
                    "Could not read subscription %s; reporting local state only",
                    user.stripe_subscription_id,
                )
            else:
                cancel_at_period_end = provider_sub.cancel_at_period_end
                provider_checked = True

        return SubscriptionStatusResult(
            state=get_subscription_state(
                user,
                cancel_at_period_end=cancel_at_period_end,
            ),
            is_premium=has_premium_access(user),
            expires_at=user.subscription_expires_at,
            cancel_at_period_end=cancel_at_period_end,
            provider_checked=provider_checked,
        )
