"""
Management command to seed default platform settings.

Usage:
    python manage.py seed_platform_settings          # Create missing keys
    python manage.py seed_platform_settings --force  # Reset keys to defaults
"""

from django.core.management.base import BaseCommand

from moorings.billing.constants import DEFAULT_PREMIUM_PRICE
from moorings.billing.constants import DEFAULT_TRIAL_DAYS
from moorings.billing.constants import PlatformSettingKey
from moorings.core.models import PlatformSetting

SETTING_DEFAULTS = {
    PlatformSettingKey.PREMIUM_PRICE: {
        "value": str(DEFAULT_PREMIUM_PRICE),
        "description": "Annual premium subscription price in the billing currency.",
    },
    PlatformSettingKey.TRIAL_DAYS: {
        "value": str(DEFAULT_TRIAL_DAYS),
        "description": "Free trial days offered at checkout.",
    },
}


class Command(BaseCommand):
    help = "Seed default platform settings"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite existing values with the defaults",
        )

    def handle(self, *args, **options):
        for key, config in SETTING_DEFAULTS.items():
            setting, created = PlatformSetting.objects.get_or_create(
                key=key,
                defaults=config,
            )

            if created:
                self.stdout.write(self.style.SUCCESS(f"  Created: {setting.key}"))
            elif options["force"]:
                for field, value in config.items():
                    setattr(setting, field, value)
                setting.save()
                self.stdout.write(self.style.SUCCESS(f"  Updated: {setting.key}"))
            else:
                self.stdout.write(
                    f"  Exists: {setting.key} (use --force to reset)",
                )
