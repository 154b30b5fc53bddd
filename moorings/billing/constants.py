"""
Billing constants for premium subscriptions and promo codes.

SubscriptionStatus is the value stored on the user record. SubscriptionState
is the derived lifecycle state reported to clients, which also accounts for
pending checkouts and cancellations scheduled at the provider.
"""

import calendar
from datetime import datetime
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class SubscriptionStatus(models.TextChoices):
    """Stored entitlement flag on the user record."""

    FREE = "free", _("Free")
    PREMIUM = "premium", _("Premium")


class SubscriptionState(models.TextChoices):
    """
    Derived subscription lifecycle states.

    Typical flow:
        FREE → PENDING (checkout started, payment incomplete)
        PENDING → PREMIUM (payment confirmed, expiry set)
        PREMIUM → CANCEL_SCHEDULED (cancel at period end requested)
        PREMIUM | CANCEL_SCHEDULED → FREE (deleted, or expiry passed)

    A full-discount promo goes straight from FREE to PREMIUM.
    """

    FREE = "free", _("Free")
    PENDING = "pending", _("Pending")
    PREMIUM = "premium", _("Premium")
    CANCEL_SCHEDULED = "cancel_scheduled", _("Cancellation scheduled")


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentage", _("Percentage")
    FIXED = "fixed", _("Fixed amount")


class PromoRejection(models.TextChoices):
    """Reasons a promo code cannot be used, in evaluation order."""

    INVALID = "invalid", _("Invalid promo code")
    INACTIVE = "inactive", _("This promo code is no longer active")
    EXPIRED = "expired", _("This promo code has expired")
    USAGE_LIMIT_REACHED = (
        "usage_limit_reached",
        _("This promo code has reached its usage limit"),
    )


class PlatformSettingKey(models.TextChoices):
    PREMIUM_PRICE = "premium_price", _("Premium annual price")
    TRIAL_DAYS = "trial_days", _("Trial days")


# Annual premium price used when no platform setting overrides it
DEFAULT_PREMIUM_PRICE = Decimal("119.99")

DEFAULT_TRIAL_DAYS = 0

FULL_DISCOUNT_PERCENT = Decimal(100)

# Provider subscription statuses that grant premium access
PROVIDER_ACTIVE_STATUSES = frozenset({"active", "trialing"})

BILLING_INTERVAL = "year"

# Minor units per major unit for the charge currency (cents per euro)
MINOR_UNITS = 100


def add_one_year(moment: datetime) -> datetime:
    """
    Return the same instant one calendar year later.

    February 29 maps to February 28 in non-leap years.
    """
    year = moment.year + 1
    day = min(moment.day, calendar.monthrange(year, moment.month)[1])
    return moment.replace(year=year, day=day)
