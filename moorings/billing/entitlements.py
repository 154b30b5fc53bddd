"""
Entitlement checks for premium access.

``is_premium`` is the one predicate for the stored premium flag. Every
access-critical decision (redaction, booking) goes through
``has_premium_access``, which applies lazy expiry on top of it: a user whose
``subscription_expires_at`` has passed is treated as free even if no webhook
has downgraded the stored flag yet.
"""

from __future__ import annotations

from datetime import datetime

from django.contrib.auth.models import AnonymousUser
from django.utils import timezone

from moorings.billing.constants import SubscriptionState
from moorings.billing.constants import SubscriptionStatus
from moorings.billing.errors import UpgradeRequiredError


def is_premium(user) -> bool:
    """True iff there is a user and their stored status is premium."""
    if user is None or isinstance(user, AnonymousUser):
        return False
    return getattr(user, "subscription_status", None) == SubscriptionStatus.PREMIUM


def is_subscription_expired(user, now: datetime | None = None) -> bool:
    expires_at = getattr(user, "subscription_expires_at", None)
    if expires_at is None:
        return False
    now = now or timezone.now()
    return now > expires_at


def has_premium_access(user, now: datetime | None = None) -> bool:
    """Premium flag set and expiry (if any) not yet passed."""
    return is_premium(user) and not is_subscription_expired(user, now)


def require_premium_access(user, now: datetime | None = None) -> None:
    """Raise UpgradeRequiredError unless the user currently has premium access."""
    if not has_premium_access(user, now):
        raise UpgradeRequiredError(
            "Premium subscription required. Upgrade to Premium to continue.",
        )


def get_subscription_state(
    user,
    *,
    cancel_at_period_end: bool = False,
    now: datetime | None = None,
) -> str:
    """
    Derive the lifecycle state from the user record.

    ``cancel_at_period_end`` is provider-side knowledge; callers that have
    fetched the provider subscription pass it in.
    """
    if has_premium_access(user, now):
        if cancel_at_period_end:
            return SubscriptionState.CANCEL_SCHEDULED
        return SubscriptionState.PREMIUM
    if is_premium(user):
        # Lapsed: stored flag still says premium but the period is over.
        return SubscriptionState.FREE
    if getattr(user, "stripe_subscription_id", ""):
        return SubscriptionState.PENDING
    return SubscriptionState.FREE
