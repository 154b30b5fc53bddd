from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated

from moorings.billing.errors import BillingValidationError
from moorings.billing.errors import ConflictError
from moorings.billing.errors import ExternalProviderError
from moorings.billing.errors import NotFoundError
from moorings.billing.errors import PromoCodeRejectedError
from moorings.billing.errors import SignatureVerificationError
from moorings.billing.errors import UpgradeRequiredError
from moorings.core.api.exceptions import api_exception_handler
from moorings.core.models import PlatformSetting
from moorings.core.site_settings import get_pricing_settings


class TestExceptionHandler:
    @pytest.mark.parametrize(
        ("exc", "expected_status"),
        [
            (BillingValidationError("bad"), status.HTTP_400_BAD_REQUEST),
            (PromoCodeRejectedError("expired", reason="expired"), status.HTTP_400_BAD_REQUEST),
            (NotFoundError("missing"), status.HTTP_404_NOT_FOUND),
            (ConflictError("clash"), status.HTTP_409_CONFLICT),
            (ExternalProviderError(), status.HTTP_502_BAD_GATEWAY),
            (SignatureVerificationError(), status.HTTP_400_BAD_REQUEST),
            (UpgradeRequiredError(), status.HTTP_403_FORBIDDEN),
        ],
    )
    def test_status_mapping(self, exc, expected_status):
        response = api_exception_handler(exc, {})

        assert response.status_code == expected_status
        assert response.data["detail"] == exc.detail
        assert response.data["code"] == exc.code

    def test_upgrade_required_flag(self):
        response = api_exception_handler(UpgradeRequiredError(), {})
        assert response.data["upgrade_required"] is True

    def test_other_errors_fall_through_to_drf(self):
        response = api_exception_handler(NotAuthenticated(), {})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_unexpected_errors_are_not_handled(self):
        assert api_exception_handler(RuntimeError("boom"), {}) is None


@pytest.mark.django_db
class TestSettingsApi:
    def test_public_settings_are_anonymous(self, api_client):
        response = api_client.get(reverse("api:public-settings"))

        assert response.status_code == 200
        assert response.data == {"premium_price": "119.99", "trial_days": 0}

    def test_admin_list_requires_admin(self, api_client, user):
        api_client.force_authenticate(user)

        response = api_client.get(reverse("api:admin-settings"))

        assert response.status_code == 403

    def test_admin_upsert_changes_price(self, api_client, admin_user):
        api_client.force_authenticate(admin_user)

        response = api_client.put(
            reverse("api:admin-setting-detail", args=["premium_price"]),
            {"value": "129.00", "description": "Annual price"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["key"] == "premium_price"
        assert response.data["value"] == "129.00"
        assert get_pricing_settings().premium_price == Decimal("129.00")

    def test_admin_list(self, api_client, admin_user):
        PlatformSetting.objects.create(key="trial_days", value="0")
        api_client.force_authenticate(admin_user)

        response = api_client.get(reverse("api:admin-settings"))

        assert response.status_code == 200
        assert [row["key"] for row in response.data] == ["trial_days"]
