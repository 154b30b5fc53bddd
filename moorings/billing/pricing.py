"""
Pricing calculator for the annual premium subscription.

All arithmetic is done on unrounded Decimals. Rounding to two places
(ROUND_HALF_UP) happens only when an amount is displayed or charged, through
``PriceQuote.display_*`` and ``PriceQuote.charge_amount_minor``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP
from decimal import Decimal
from typing import TYPE_CHECKING

from moorings.billing.constants import FULL_DISCOUNT_PERCENT
from moorings.billing.constants import MINOR_UNITS
from moorings.billing.constants import DiscountType
from moorings.core.site_settings import get_pricing_settings

if TYPE_CHECKING:
    from moorings.billing.models import PromoCode

CENT = Decimal("0.01")
ZERO = Decimal(0)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 119.99 as 119.99 instead of its binary float expansion
    return Decimal(str(value))


def to_display_amount(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceQuote:
    """Result of applying an optional promo to the base price."""

    base_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    is_full_discount: bool

    @property
    def display_discount_amount(self) -> Decimal:
        return to_display_amount(self.discount_amount)

    @property
    def display_final_price(self) -> Decimal:
        return to_display_amount(self.final_price)

    @property
    def charge_amount(self) -> Decimal:
        """Amount sent to the provider, rounded to cents."""
        return to_display_amount(self.final_price)

    @property
    def charge_amount_minor(self) -> int:
        return int(self.charge_amount * MINOR_UNITS)


def compute_price(base_price, promo: PromoCode | None = None) -> PriceQuote:
    """
    Apply ``promo`` to ``base_price``.

    Percentage codes take ``value`` percent off and count as a full discount
    at 100 or more. Fixed codes take ``min(value, base)`` off and never count
    as a full discount, even when they bring the price to zero.
    """
    base = to_decimal(base_price)
    if promo is None:
        return PriceQuote(
            base_price=base,
            discount_amount=ZERO,
            final_price=base,
            is_full_discount=False,
        )

    value = to_decimal(promo.discount_value)
    if promo.discount_type == DiscountType.FIXED:
        discount = min(value, base)
        is_full_discount = False
    else:
        discount = min(base * value / 100, base)
        is_full_discount = value >= FULL_DISCOUNT_PERCENT

    final = max(base - discount, ZERO)
    return PriceQuote(
        base_price=base,
        discount_amount=discount,
        final_price=final,
        is_full_discount=is_full_discount,
    )


def get_premium_price() -> Decimal:
    """Current annual price from platform settings, falling back to the default."""
    return get_pricing_settings().premium_price


def quote_premium(promo: PromoCode | None = None) -> PriceQuote:
    return compute_price(get_premium_price(), promo)
