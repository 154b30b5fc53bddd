from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from moorings.locations.models import LocationType
from moorings.locations.redaction import CONTACT_SENTINEL
from moorings.locations.redaction import DESCRIPTION_SUFFIX
from moorings.locations.redaction import WEBSITE_SENTINEL
from moorings.locations.tests.factories import MooringLocationFactory
from moorings.users.tests.factories import PremiumUserFactory

LONG_DESCRIPTION = (
    "Deep water marina in a sheltered harbour with fuel, water and power on "
    "every pontoon, a chandlery on site and a short walk to the town centre "
    "with its restaurants and shops."
)


@pytest.mark.django_db
class TestMooringLocationList:
    url = reverse("api:mooring-location-list")

    def test_anonymous_list_is_redacted(self, api_client):
        MooringLocationFactory(description=LONG_DESCRIPTION)

        response = api_client.get(self.url)

        assert response.status_code == 200
        row = response.data[0]
        assert row["phone"] == CONTACT_SENTINEL
        assert row["email"] == CONTACT_SENTINEL
        assert row["website"] == WEBSITE_SENTINEL
        assert row["description"] == LONG_DESCRIPTION[:80] + DESCRIPTION_SUFFIX
        assert row["has_fuel"] is False
        assert row["has_water"] is False

    def test_free_user_list_is_redacted(self, api_client, user):
        MooringLocationFactory()
        api_client.force_authenticate(user)

        response = api_client.get(self.url)

        assert response.data[0]["phone"] == CONTACT_SENTINEL

    def test_premium_user_sees_everything(self, api_client, premium_user):
        location = MooringLocationFactory(description=LONG_DESCRIPTION)
        api_client.force_authenticate(premium_user)

        response = api_client.get(self.url)

        row = response.data[0]
        assert row["phone"] == location.phone
        assert row["website"] == location.website
        assert row["description"] == LONG_DESCRIPTION
        assert row["has_fuel"] is True

    def test_lapsed_premium_user_is_redacted(self, api_client):
        MooringLocationFactory()
        lapsed = PremiumUserFactory(
            subscription_expires_at=timezone.now() - timedelta(minutes=1),
        )
        api_client.force_authenticate(lapsed)

        response = api_client.get(self.url)

        assert response.data[0]["phone"] == CONTACT_SENTINEL

    def test_filtered_results_are_redacted(self, api_client):
        MooringLocationFactory(name="Dingle Marina", type=LocationType.MARINA, region="South West")
        MooringLocationFactory(name="Howth Pier", type=LocationType.PIER, region="East")

        response = api_client.get(self.url, {"type": "PIER"})

        assert [row["name"] for row in response.data] == ["Howth Pier"]
        assert response.data[0]["phone"] == CONTACT_SENTINEL

    def test_region_and_search_filters(self, api_client):
        MooringLocationFactory(name="Dingle Marina", county="Kerry", region="South West")
        MooringLocationFactory(name="Howth Pier", county="Dublin", region="East")
        MooringLocationFactory(name="Bantry Jetty", county="Cork", region="South West")

        by_region = api_client.get(self.url, {"region": "south west"})
        by_county = api_client.get(self.url, {"search": "kerry"})

        assert [row["name"] for row in by_region.data] == ["Bantry Jetty", "Dingle Marina"]
        assert [row["name"] for row in by_county.data] == ["Dingle Marina"]


@pytest.mark.django_db
class TestMooringLocationDetail:
    def test_detail_uses_longer_limit(self, api_client):
        location = MooringLocationFactory(description=LONG_DESCRIPTION)

        response = api_client.get(
            reverse("api:mooring-location-detail", args=[location.pk]),
        )

        assert response.status_code == 200
        assert response.data["description"] == LONG_DESCRIPTION[:120] + DESCRIPTION_SUFFIX

    def test_detail_without_description(self, api_client):
        location = MooringLocationFactory(description=None, website=None)

        response = api_client.get(
            reverse("api:mooring-location-detail", args=[location.pk]),
        )

        assert response.data["website"] is None
        assert response.data["description"].startswith("Upgrade to Premium")

    def test_missing_location(self, api_client):
        response = api_client.get(reverse("api:mooring-location-detail", args=[999999]))

        assert response.status_code == 404
