"""
Helpers for loading and validating platform-wide settings.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP
from decimal import Decimal

from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from moorings.billing.constants import DEFAULT_PREMIUM_PRICE
from moorings.billing.constants import DEFAULT_TRIAL_DAYS
from moorings.billing.constants import PlatformSettingKey
from moorings.core.models import PlatformSetting

logger = logging.getLogger(__name__)


class PricingSettings(BaseModel):
    """
    Strongly typed overlay for the pricing keys in PlatformSetting.
    """

    premium_price: Decimal = Field(
        default=DEFAULT_PREMIUM_PRICE,
        gt=0,
        description="Annual premium price in the billing currency.",
    )
    trial_days: int = Field(
        default=DEFAULT_TRIAL_DAYS,
        ge=0,
        description="Free trial length offered at checkout. Zero disables it.",
    )

    def public_dict(self) -> dict[str, str | int]:
        return {
            PlatformSettingKey.PREMIUM_PRICE.value: str(
                self.premium_price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            ),
            PlatformSettingKey.TRIAL_DAYS.value: self.trial_days,
        }


def get_setting(key: str) -> str | None:
    """Return the stored value for ``key`` or None when unset."""
    return (
        PlatformSetting.objects.filter(key=key).values_list("value", flat=True).first()
    )


def set_setting(
    key: str,
    value: str,
    description: str | None = None,
) -> PlatformSetting:
    """Create or update a setting. Only admin-facing code paths call this."""
    defaults = {"value": value}
    if description is not None:
        defaults["description"] = description
    setting, created = PlatformSetting.objects.update_or_create(
        key=key,
        defaults=defaults,
    )
    logger.info(
        "Platform setting %s %s",
        key,
        "created" if created else "updated",
    )
    return setting


def get_pricing_settings() -> PricingSettings:
    """
    Load pricing keys and return a typed view of them.

    A value that fails validation is dropped with a warning so the default
    applies instead of breaking checkout.
    """
    raw = {
        key: value.strip()
        for key, value in PlatformSetting.objects.filter(
            key__in=PricingSettings.model_fields.keys(),
        ).values_list("key", "value")
    }
    try:
        return PricingSettings.model_validate(raw)
    except PydanticValidationError as exc:
        invalid = {error["loc"][0] for error in exc.errors() if error["loc"]}
        logger.warning(
            "Invalid pricing settings %s; falling back to defaults.",
            sorted(invalid),
        )
        return PricingSettings.model_validate(
            {key: value for key, value in raw.items() if key not in invalid},
        )


def get_public_settings() -> dict[str, str | int]:
    return get_pricing_settings().public_dict()
