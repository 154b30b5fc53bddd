from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib.auth.models import AbstractUser
from django.contrib.auth.models import UserManager as DjangoUserManager
from django.db import models
from django.db.models import CharField
from django.utils.translation import gettext_lazy as _

from moorings.billing.constants import SubscriptionStatus
from moorings.users.constants import RoleCode

if TYPE_CHECKING:
    from datetime import datetime


class UserManager(DjangoUserManager):
    """
    User store used by the subscription lifecycle.

    Subscription fields are only written through ``update_subscription`` and
    ``update_billing_refs`` so every transition is a single UPDATE statement.
    """

    def get_by_email(self, email: str) -> User | None:
        return self.filter(email__iexact=email.strip()).first()

    def update_subscription(
        self,
        user_id: int,
        status: str,
        expires_at: datetime | None = None,
    ) -> int:
        return self.filter(pk=user_id).update(
            subscription_status=status,
            subscription_expires_at=expires_at,
        )

    def update_billing_refs(
        self,
        user_id: int,
        customer_id: str | None = None,
        subscription_id: str | None = None,
    ) -> int:
        """
        Record external billing references. ``None`` leaves a field unchanged;
        an empty string clears it.
        """
        fields = {}
        if customer_id is not None:
            fields["stripe_customer_id"] = customer_id
        if subscription_id is not None:
            fields["stripe_subscription_id"] = subscription_id
        if not fields:
            return 0
        return self.filter(pk=user_id).update(**fields)


class User(AbstractUser):
    """
    Default custom user model for Moorings.

    Carries the premium entitlement directly: ``subscription_status`` is the
    stored flag and ``subscription_expires_at`` the provider's period end.
    """

    # First and last name do not cover name patterns around the globe
    name = CharField(_("Name of User"), blank=True, max_length=255)
    email = models.EmailField(_("email address"), unique=True)

    role = models.CharField(
        max_length=16,
        choices=RoleCode.choices,
        default=RoleCode.USER,
    )

    subscription_status = models.CharField(
        max_length=16,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.FREE,
    )
    subscription_expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("End of the current paid period, as reported by Stripe."),
    )
    stripe_customer_id = models.CharField(max_length=255, blank=True, default="")
    stripe_subscription_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
    )

    first_name = None  # type: ignore[assignment]

    last_name = None  # type: ignore[assignment]

    objects = UserManager()

    def __str__(self):
        return self.email or self.username

    @property
    def is_platform_admin(self) -> bool:
        return self.role == RoleCode.ADMIN
