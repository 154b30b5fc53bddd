"""
Public API router.

Location reads and promo validation are open to anonymous users (with
redaction applied); checkout, bookings and the admin endpoints require
authentication.
"""

from django.conf import settings
from django.urls import include
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from moorings.billing.views import AdminPromoCodeViewSet
from moorings.bookings.views import BookingViewSet
from moorings.core.api.views import AdminSettingDetailView
from moorings.core.api.views import AdminSettingsView
from moorings.core.api.views import PublicSettingsView
from moorings.locations.views import MooringLocationViewSet
from moorings.users.api.views import AdminUserViewSet
from moorings.users.api.views import AuthMeView

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("mooring-locations", MooringLocationViewSet, basename="mooring-location")
router.register("bookings", BookingViewSet, basename="booking")
router.register("admin/users", AdminUserViewSet, basename="admin-user")
router.register("admin/promo-codes", AdminPromoCodeViewSet, basename="admin-promo-code")

app_name = "api"
urlpatterns = [
    path("auth/me/", AuthMeView.as_view(), name="auth-me"),
    path("settings/", PublicSettingsView.as_view(), name="public-settings"),
    path("admin/settings/", AdminSettingsView.as_view(), name="admin-settings"),
    path(
        "admin/settings/<str:key>/",
        AdminSettingDetailView.as_view(),
        name="admin-setting-detail",
    ),
    path("billing/", include("moorings.billing.urls")),
    *router.urls,
]
