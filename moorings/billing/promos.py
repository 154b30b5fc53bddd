"""
Promo code engine.

Validation is split from redemption: ``validate_promo_code`` never changes
state, and ``record_redemption`` is called by checkout only once the promo
has been confirmed valid for a subscription being created.

Usage:
    validation = validate_promo_code("summer10")
    if not validation.is_valid:
        return validation.message

    # later, inside the checkout transaction
    record_redemption(validation.promo.pk)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.db import IntegrityError
from django.db import transaction
from django.utils import timezone

from moorings.billing.constants import FULL_DISCOUNT_PERCENT
from moorings.billing.constants import DiscountType
from moorings.billing.constants import PromoRejection
from moorings.billing.errors import BillingValidationError
from moorings.billing.errors import ConflictError
from moorings.billing.errors import NotFoundError
from moorings.billing.errors import PromoCodeRejectedError
from moorings.billing.models import PromoCode
from moorings.billing.models import normalize_code

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromoValidation:
    """Outcome of checking a promo code at a point in time."""

    code: str
    promo: PromoCode | None = None
    rejection: PromoRejection | None = None

    @property
    def is_valid(self) -> bool:
        return self.rejection is None

    @property
    def message(self) -> str:
        if self.rejection is None:
            return ""
        return str(self.rejection.label)

    def raise_if_rejected(self) -> PromoCode:
        if self.rejection is not None:
            raise PromoCodeRejectedError(self.message, reason=self.rejection.value)
        return self.promo


def evaluate_promo(promo: PromoCode | None, now: datetime) -> PromoRejection | None:
    """
    Return the first reason ``promo`` is unusable at ``now``, or None.

    Order matters: a missing code is invalid, then the active flag, then the
    expiry, then the usage cap.
    """
    if promo is None:
        return PromoRejection.INVALID
    if not promo.is_active:
        return PromoRejection.INACTIVE
    if promo.expires_at is not None and now > promo.expires_at:
        return PromoRejection.EXPIRED
    if promo.max_uses is not None and promo.current_uses >= promo.max_uses:
        return PromoRejection.USAGE_LIMIT_REACHED
    return None


def validate_promo_code(code: str, now: datetime | None = None) -> PromoValidation:
    normalized = normalize_code(code)
    if not normalized:
        raise BillingValidationError(
            "Promo code is required",
            code="promo_code_required",
        )
    now = now or timezone.now()
    promo = PromoCode.objects.get_by_code(normalized)
    rejection = evaluate_promo(promo, now)
    if rejection is not None:
        logger.info("Promo code %s rejected: %s", normalized, rejection.value)
    return PromoValidation(code=normalized, promo=promo, rejection=rejection)


def record_redemption(promo_id: int) -> None:
    """
    Consume one use of the promo.

    Raises ConflictError when another checkout took the last use between
    validation and this call.
    """
    if not PromoCode.objects.increment_uses_if_below_cap(promo_id):
        logger.info("Promo redemption lost cap race for promo_id=%s", promo_id)
        raise ConflictError(
            str(PromoRejection.USAGE_LIMIT_REACHED.label),
            code=f"promo_{PromoRejection.USAGE_LIMIT_REACHED.value}",
        )
    logger.info("Recorded redemption for promo_id=%s", promo_id)


def _validate_discount(discount_type: str, discount_value: Decimal) -> None:
    if discount_type == DiscountType.PERCENTAGE:
        if not (0 < discount_value <= FULL_DISCOUNT_PERCENT):
            raise BillingValidationError(
                "Percentage discounts must be greater than 0 and at most 100.",
                code="invalid_discount_value",
            )
    elif discount_type == DiscountType.FIXED:
        if discount_value <= 0:
            raise BillingValidationError(
                "Fixed discounts must be greater than 0.",
                code="invalid_discount_value",
            )
    else:
        raise BillingValidationError(
            f"Unknown discount type '{discount_type}'.",
            code="invalid_discount_type",
        )


def create_promo_code(
    code: str,
    discount_type: str,
    discount_value: Decimal,
    *,
    description: str = "",
    max_uses: int | None = None,
    expires_at: datetime | None = None,
    is_active: bool = True,
) -> PromoCode:
    normalized = normalize_code(code)
    if not normalized:
        raise BillingValidationError("Promo code is required", code="promo_code_required")
    discount_value = Decimal(discount_value)
    _validate_discount(discount_type, discount_value)
    if max_uses is not None and max_uses < 1:
        raise BillingValidationError(
            "max_uses must be at least 1 when set.",
            code="invalid_max_uses",
        )
    if PromoCode.objects.filter(code=normalized).exists():
        raise ConflictError(
            f"Promo code {normalized} already exists.",
            code="promo_code_exists",
        )

    try:
        with transaction.atomic():
            promo = PromoCode.objects.create(
                code=normalized,
                description=description,
                discount_type=discount_type,
                discount_value=discount_value,
                max_uses=max_uses,
                expires_at=expires_at,
                is_active=is_active,
            )
    except IntegrityError as exc:
        raise ConflictError(
            f"Promo code {normalized} already exists.",
            code="promo_code_exists",
        ) from exc

    logger.info(
        "Created promo code %s (%s %s, max_uses=%s)",
        promo.code,
        promo.discount_type,
        promo.discount_value,
        promo.max_uses,
    )
    return promo


def deactivate_promo_code(promo_id: int) -> PromoCode:
    if not PromoCode.objects.deactivate(promo_id):
        raise NotFoundError("Promo code not found", code="promo_not_found")
    promo = PromoCode.objects.get(pk=promo_id)
    logger.info("Deactivated promo code %s", promo.code)
    return promo
