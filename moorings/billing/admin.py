"""
Django admin configuration for billing models.
"""

from django.contrib import admin

from moorings.billing.models import PromoCode


@admin.register(PromoCode)
class PromoCodeAdmin(admin.ModelAdmin):
    """Admin for promo codes. ``current_uses`` only changes through redemption."""

    list_display = [
        "code",
        "discount_type",
        "discount_value",
        "current_uses",
        "max_uses",
        "expires_at",
        "is_active",
    ]
    list_filter = ["is_active", "discount_type"]
    search_fields = ["code"]
    readonly_fields = ["current_uses", "created", "modified"]

    fieldsets = [
        (None, {"fields": ["code", "is_active"]}),
        ("Discount", {"fields": ["discount_type", "discount_value"]}),
        ("Limits", {"fields": ["max_uses", "current_uses", "expires_at"]}),
        ("Timestamps", {"fields": ["created", "modified"]}),
    ]
