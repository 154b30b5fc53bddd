from django.contrib import admin

from moorings.locations.models import MooringLocation


@admin.register(MooringLocation)
class MooringLocationAdmin(admin.ModelAdmin):
    list_display = ["name", "type", "county", "region", "capacity"]
    list_filter = ["type", "region"]
    search_fields = ["name", "address", "county"]

    fieldsets = [
        (None, {"fields": ["name", "type", "address", "county", "region"]}),
        ("Position", {"fields": ["latitude", "longitude", "depth", "capacity"]}),
        (
            "Amenities",
            {
                "fields": [
                    "has_fuel",
                    "has_water",
                    "has_electricity",
                    "has_waste_disposal",
                    "has_showers",
                    "has_restaurant",
                    "has_wifi",
                    "has_laundry",
                    "has_parking",
                ],
            },
        ),
        ("Contact", {"fields": ["phone", "email", "website", "description"]}),
    ]
