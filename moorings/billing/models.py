"""
Billing models for premium subscriptions.

Subscription state itself lives on ``users.User``; this module holds the
promo codes that discount the annual premium price.
"""

from __future__ import annotations

from django.db import models
from django.db.models import F
from django.db.models import Q
from model_utils.models import TimeStampedModel

from moorings.billing.constants import DiscountType


def normalize_code(code: str) -> str:
    """Canonical form used for both storing and looking up promo codes."""
    return (code or "").strip().upper()


class PromoCodeManager(models.Manager):
    def get_by_code(self, code: str) -> PromoCode | None:
        normalized = normalize_code(code)
        if not normalized:
            return None
        return self.filter(code=normalized).first()

    def increment_uses_if_below_cap(self, promo_id: int) -> bool:
        """
        Atomically consume one use.

        The cap check and the increment happen in one conditional UPDATE, so
        two concurrent redemptions can never push ``current_uses`` past
        ``max_uses``. Returns False when the cap was already reached.
        """
        updated = (
            self.filter(pk=promo_id)
            .filter(Q(max_uses__isnull=True) | Q(current_uses__lt=F("max_uses")))
            .update(current_uses=F("current_uses") + 1)
        )
        return updated == 1

    def deactivate(self, promo_id: int) -> int:
        return self.filter(pk=promo_id).update(is_active=False)


class PromoCode(TimeStampedModel):
    """
    Discount token applied to the annual premium price at checkout.

    A code is usable while it is active, not past ``expires_at`` and below
    ``max_uses``. ``current_uses`` only ever grows, one per redemption.
    """

    code = models.CharField(
        max_length=50,
        unique=True,
        help_text="Stored upper case; lookups are case-insensitive.",
    )
    description = models.TextField(blank=True, default="")
    discount_type = models.CharField(
        max_length=16,
        choices=DiscountType.choices,
        default=DiscountType.PERCENTAGE,
    )
    discount_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Percent off for percentage codes, amount off for fixed codes.",
    )
    max_uses = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Null = unlimited.",
    )
    current_uses = models.PositiveIntegerField(default=0)
    expires_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    objects = PromoCodeManager()

    class Meta:
        ordering = ["-created"]
        constraints = [
            models.CheckConstraint(
                condition=Q(max_uses__isnull=True) | Q(current_uses__lte=F("max_uses")),
                name="promo_current_uses_within_cap",
            ),
        ]

    def __str__(self) -> str:
        return self.code

    def save(self, *args, **kwargs):
        self.code = normalize_code(self.code)
        super().save(*args, **kwargs)
