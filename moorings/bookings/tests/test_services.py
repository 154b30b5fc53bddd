from datetime import date
from datetime import timedelta

import pytest
from django.utils import timezone

from moorings.billing.errors import NotFoundError
from moorings.billing.errors import UpgradeRequiredError
from moorings.bookings.models import Booking
from moorings.bookings.models import BookingStatus
from moorings.bookings.services import create_booking
from moorings.bookings.services import update_booking_status
from moorings.bookings.tests.factories import BookingFactory
from moorings.locations.tests.factories import MooringLocationFactory
from moorings.users.tests.factories import PremiumUserFactory
from moorings.users.tests.factories import UserFactory


def booking_data(location, **overrides):
    data = {
        "location": location,
        "customer_name": "Aoife Byrne",
        "customer_email": "aoife@example.com",
        "check_in_date": date(2027, 7, 1),
        "check_out_date": date(2027, 7, 4),
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
class TestCreateBooking:
    def test_premium_user_can_book(self):
        user = PremiumUserFactory()
        location = MooringLocationFactory()

        booking = create_booking(user, booking_data(location))

        assert booking.user == user
        assert booking.status == BookingStatus.PENDING
        assert booking.number_of_nights == 3

    def test_explicit_nights_are_kept(self):
        booking = create_booking(
            PremiumUserFactory(),
            booking_data(MooringLocationFactory(), number_of_nights=2),
        )
        assert booking.number_of_nights == 2

    def test_free_user_is_refused(self):
        with pytest.raises(UpgradeRequiredError):
            create_booking(UserFactory(), booking_data(MooringLocationFactory()))

        assert Booking.objects.count() == 0

    def test_lapsed_premium_is_refused(self):
        now = timezone.now()
        user = PremiumUserFactory(subscription_expires_at=now - timedelta(seconds=1))

        with pytest.raises(UpgradeRequiredError):
            create_booking(user, booking_data(MooringLocationFactory()), now=now)


@pytest.mark.django_db
class TestUpdateBookingStatus:
    def test_confirm_booking(self):
        booking = BookingFactory()

        updated = update_booking_status(booking.pk, BookingStatus.CONFIRMED)

        assert updated.status == BookingStatus.CONFIRMED

    def test_unknown_booking(self):
        with pytest.raises(NotFoundError):
            update_booking_status(999999, BookingStatus.CANCELLED)
