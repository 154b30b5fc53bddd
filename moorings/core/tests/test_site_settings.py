from decimal import Decimal
from unittest.mock import patch

import pytest

from moorings.core.models import PlatformSetting
from moorings.core.site_settings import get_pricing_settings
from moorings.core.site_settings import get_public_settings
from moorings.core.site_settings import get_setting
from moorings.core.site_settings import set_setting


@pytest.mark.django_db
class TestPricingSettings:
    def test_defaults_when_nothing_stored(self):
        settings = get_pricing_settings()

        assert settings.premium_price == Decimal("119.99")
        assert settings.trial_days == 0

    def test_stored_values_are_parsed(self):
        set_setting("premium_price", " 99.00 ")
        set_setting("trial_days", "7")

        settings = get_pricing_settings()

        assert settings.premium_price == Decimal("99.00")
        assert settings.trial_days == 7

    def test_invalid_value_only_drops_that_key(self):
        set_setting("premium_price", "-5")
        set_setting("trial_days", "3")

        with patch("moorings.core.site_settings.logger") as mock_logger:
            settings = get_pricing_settings()

        assert settings.premium_price == Decimal("119.99")
        assert settings.trial_days == 3
        mock_logger.warning.assert_called_once()

    def test_unrelated_keys_are_ignored(self):
        set_setting("maintenance_banner", "Back soon")
        assert get_pricing_settings().premium_price == Decimal("119.99")

    def test_public_settings_only_expose_pricing(self):
        set_setting("premium_price", "89.5")
        set_setting("internal_note", "secret")

        assert get_public_settings() == {"premium_price": "89.50", "trial_days": 0}


@pytest.mark.django_db
class TestSetSetting:
    def test_creates_and_updates(self):
        set_setting("premium_price", "100", description="Annual price")
        set_setting("premium_price", "110")

        setting = PlatformSetting.objects.get(key="premium_price")
        assert setting.value == "110"
        assert setting.description == "Annual price"
        assert get_setting("premium_price") == "110"

    def test_get_missing_setting(self):
        assert get_setting("nope") is None
