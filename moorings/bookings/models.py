from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _
from model_utils.models import TimeStampedModel


class BookingStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    CONFIRMED = "confirmed", _("Confirmed")
    CANCELLED = "cancelled", _("Cancelled")


class Booking(TimeStampedModel):
    """A berth reservation at a mooring location. Premium users only."""

    location = models.ForeignKey(
        "locations.MooringLocation",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=50, blank=True, default="")
    boat_name = models.CharField(max_length=255, blank=True, default="")
    boat_length = models.FloatField(
        null=True,
        blank=True,
        help_text=_("Boat length in meters."),
    )
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    number_of_nights = models.PositiveIntegerField()
    total_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )
    special_requests = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=16,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
    )

    class Meta:
        ordering = ["-created"]

    def __str__(self):
        return f"{self.customer_name} @ {self.location_id} ({self.check_in_date})"
