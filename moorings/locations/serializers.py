from rest_framework import serializers

from moorings.locations.models import MooringLocation
from moorings.locations.redaction import LIST_DESCRIPTION_LIMIT
from moorings.locations.redaction import redact_location


class MooringLocationSerializer(serializers.ModelSerializer[MooringLocation]):
    """
    Location representation passed through the redaction filter.

    The view supplies ``is_premium`` and ``description_limit`` in the
    serializer context; without them output is redacted at the list limit.
    """

    class Meta:
        model = MooringLocation
        fields = [
            "id",
            "name",
            "address",
            "county",
            "region",
            "type",
            "latitude",
            "longitude",
            "capacity",
            "depth",
            "has_fuel",
            "has_water",
            "has_electricity",
            "has_waste_disposal",
            "has_showers",
            "has_restaurant",
            "has_wifi",
            "has_laundry",
            "has_parking",
            "phone",
            "email",
            "website",
            "description",
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        return redact_location(
            data,
            is_premium=self.context.get("is_premium", False),
            description_limit=self.context.get(
                "description_limit",
                LIST_DESCRIPTION_LIMIT,
            ),
        )
