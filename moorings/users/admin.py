from django.contrib import admin
from django.contrib.auth import admin as auth_admin
from django.utils.translation import gettext_lazy as _

from moorings.users.models import User


@admin.register(User)
class UserAdmin(auth_admin.UserAdmin):
    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Personal info"), {"fields": ("name", "email")}),
        (
            _("Subscription"),
            {
                "fields": (
                    "subscription_status",
                    "subscription_expires_at",
                    "stripe_customer_id",
                    "stripe_subscription_id",
                ),
            },
        ),
        (
            _("Permissions"),
            {
                "fields": (
                    "role",
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )
    list_display = [
        "username",
        "email",
        "role",
        "subscription_status",
        "subscription_expires_at",
    ]
    list_filter = ["role", "subscription_status", "is_staff"]
    search_fields = ["name", "username", "email", "stripe_customer_id"]
