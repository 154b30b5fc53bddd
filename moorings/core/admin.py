from django.contrib import admin

from moorings.core.models import PlatformSetting


@admin.register(PlatformSetting)
class PlatformSettingAdmin(admin.ModelAdmin):
    list_display = (
        "key",
        "value",
        "modified",
    )
    search_fields = ("key", "description")
    readonly_fields = (
        "created",
        "modified",
    )
    ordering = ("key",)
