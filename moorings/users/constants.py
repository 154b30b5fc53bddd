from django.db import models
from django.utils.translation import gettext_lazy as _


class RoleCode(models.TextChoices):
    """
    Platform-wide roles. Admins manage promo codes, settings and bookings.
    """

    USER = "user", _("User")
    ADMIN = "admin", _("Admin")
