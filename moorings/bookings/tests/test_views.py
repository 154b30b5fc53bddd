from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from moorings.bookings.models import Booking
from moorings.bookings.tests.factories import BookingFactory
from moorings.locations.tests.factories import MooringLocationFactory
from moorings.users.tests.factories import PremiumUserFactory


@pytest.mark.django_db
class TestBookingViewSet:
    url = reverse("api:booking-list")

    def payload(self, location, **overrides):
        data = {
            "location": location.pk,
            "customer_name": "Aoife Byrne",
            "customer_email": "aoife@example.com",
            "boat_name": "Saoirse",
            "check_in_date": "2027-07-01",
            "check_out_date": "2027-07-05",
        }
        data.update(overrides)
        return data

    def test_premium_user_creates_booking(self, api_client, premium_user):
        location = MooringLocationFactory()
        api_client.force_authenticate(premium_user)

        response = api_client.post(self.url, self.payload(location), format="json")

        assert response.status_code == 201
        assert response.data["number_of_nights"] == 4
        assert response.data["status"] == "pending"
        assert Booking.objects.get().user == premium_user

    def test_free_user_gets_upgrade_required(self, api_client, user):
        api_client.force_authenticate(user)

        response = api_client.post(
            self.url,
            self.payload(MooringLocationFactory()),
            format="json",
        )

        assert response.status_code == 403
        assert response.data["code"] == "upgrade_required"
        assert response.data["upgrade_required"] is True
        assert Booking.objects.count() == 0

    def test_expired_premium_gets_upgrade_required(self, api_client):
        lapsed = PremiumUserFactory(
            subscription_expires_at=timezone.now() - timedelta(minutes=5),
        )
        api_client.force_authenticate(lapsed)

        response = api_client.post(
            self.url,
            self.payload(MooringLocationFactory()),
            format="json",
        )

        assert response.status_code == 403
        assert response.data["upgrade_required"] is True

    def test_check_out_must_follow_check_in(self, api_client, premium_user):
        api_client.force_authenticate(premium_user)

        response = api_client.post(
            self.url,
            self.payload(MooringLocationFactory(), check_out_date="2027-07-01"),
            format="json",
        )

        assert response.status_code == 400
        assert "check_out_date" in response.data

    def test_anonymous_is_refused(self, api_client):
        response = api_client.get(self.url)
        assert response.status_code in (401, 403)

    def test_users_only_see_their_own_bookings(self, api_client, premium_user):
        mine = BookingFactory(user=premium_user)
        BookingFactory()
        api_client.force_authenticate(premium_user)

        response = api_client.get(self.url)

        assert [row["id"] for row in response.data] == [mine.pk]

    def test_admin_sees_all_and_filters_by_location(self, api_client, admin_user):
        first = BookingFactory()
        BookingFactory()
        api_client.force_authenticate(admin_user)

        everything = api_client.get(self.url)
        at_location = api_client.get(self.url, {"location": first.location_id})

        assert len(everything.data) == 2
        assert [row["id"] for row in at_location.data] == [first.pk]

    def test_admin_confirms_booking(self, api_client, admin_user):
        booking = BookingFactory()
        api_client.force_authenticate(admin_user)

        response = api_client.patch(
            reverse("api:booking-set-status", args=[booking.pk]),
            {"status": "confirmed"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["status"] == "confirmed"

    def test_owner_cannot_change_status(self, api_client, premium_user):
        booking = BookingFactory(user=premium_user)
        api_client.force_authenticate(premium_user)

        response = api_client.patch(
            reverse("api:booking-set-status", args=[booking.pk]),
            {"status": "confirmed"},
            format="json",
        )

        assert response.status_code == 403
