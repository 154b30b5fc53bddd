import django_filters

from moorings.bookings.models import Booking
from moorings.bookings.models import BookingStatus


class BookingFilter(django_filters.FilterSet):
    location = django_filters.NumberFilter()
    status = django_filters.ChoiceFilter(choices=BookingStatus.choices)

    class Meta:
        model = Booking
        fields = []  # explicit filters above
