from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class LocationsConfig(AppConfig):
    name = "moorings.locations"
    verbose_name = _("Mooring locations")
