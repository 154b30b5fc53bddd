from django.db import models
from django.utils.translation import gettext_lazy as _


class LocationType(models.TextChoices):
    PIER = "pier", _("Pier")
    JETTY = "jetty", _("Jetty")
    MARINA = "marina", _("Marina")


class MooringLocation(models.Model):
    """
    A mooring facility.

    Name, type, address and coordinates are public. Contact details, the
    description and every ``has_*`` amenity flag are premium content; see
    ``moorings.locations.redaction``.
    """

    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255)
    county = models.CharField(max_length=100)
    region = models.CharField(max_length=100)
    type = models.CharField(max_length=16, choices=LocationType.choices)
    latitude = models.FloatField()
    longitude = models.FloatField()
    capacity = models.PositiveIntegerField(help_text=_("Number of berths."))
    depth = models.FloatField(help_text=_("Depth in meters."))

    # Premium amenity flags
    has_fuel = models.BooleanField(default=False)
    has_water = models.BooleanField(default=False)
    has_electricity = models.BooleanField(default=False)
    has_waste_disposal = models.BooleanField(default=False)
    has_showers = models.BooleanField(default=False)
    has_restaurant = models.BooleanField(default=False)
    has_wifi = models.BooleanField(default=False)
    has_laundry = models.BooleanField(default=False)
    has_parking = models.BooleanField(default=False)

    # Premium contact details
    phone = models.CharField(max_length=50, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    website = models.URLField(blank=True, null=True)
    description = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
