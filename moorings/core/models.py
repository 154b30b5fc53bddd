from django.db import models
from model_utils.models import TimeStampedModel


class PlatformSetting(TimeStampedModel):
    """
    Key/value configuration managed by platform admins.

    Values are stored as text and parsed into typed settings objects in
    ``moorings.core.site_settings``. Known keys include ``premium_price`` and
    ``trial_days``.
    """

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True, default="")
    description = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["key"]
        verbose_name = "Platform setting"
        verbose_name_plural = "Platform settings"

    def __str__(self):
        return f"PlatformSetting<{self.key}>"
