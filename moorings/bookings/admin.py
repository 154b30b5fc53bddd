from django.contrib import admin

from moorings.bookings.models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = [
        "customer_name",
        "location",
        "check_in_date",
        "check_out_date",
        "number_of_nights",
        "status",
    ]
    list_filter = ["status", "check_in_date"]
    search_fields = ["customer_name", "customer_email", "boat_name", "location__name"]
    raw_id_fields = ["location", "user"]
    readonly_fields = ["created", "modified"]
