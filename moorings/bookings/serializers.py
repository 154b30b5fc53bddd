from rest_framework import serializers

from moorings.bookings.models import Booking
from moorings.bookings.models import BookingStatus


class BookingSerializer(serializers.ModelSerializer[Booking]):
    number_of_nights = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = Booking
        fields = [
            "id",
            "location",
            "customer_name",
            "customer_email",
            "customer_phone",
            "boat_name",
            "boat_length",
            "check_in_date",
            "check_out_date",
            "number_of_nights",
            "total_price",
            "special_requests",
            "status",
            "created",
        ]
        read_only_fields = ["id", "status", "created"]

    def validate(self, attrs):
        check_in = attrs.get("check_in_date")
        check_out = attrs.get("check_out_date")
        if check_in and check_out and check_out <= check_in:
            raise serializers.ValidationError(
                {"check_out_date": "Check-out must be after check-in."},
            )
        return attrs


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BookingStatus.choices)
