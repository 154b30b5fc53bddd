from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from moorings.billing.entitlements import require_premium_access
from moorings.bookings.filters import BookingFilter
from moorings.bookings.models import Booking
from moorings.bookings.serializers import BookingSerializer
from moorings.bookings.serializers import BookingStatusSerializer
from moorings.bookings.services import create_booking
from moorings.bookings.services import update_booking_status
from moorings.core.permissions import IsPlatformAdmin


@extend_schema(tags=["Bookings"])
class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    """
    Users see their own bookings; platform admins see all of them and can
    change a booking's status.
    """

    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]
    queryset = Booking.objects.select_related("location")
    lookup_value_regex = r"\d+"
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilter

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if not user.is_platform_admin:
            queryset = queryset.filter(user=user)
        return queryset

    @extend_schema(
        request=BookingSerializer,
        responses={201: BookingSerializer, 403: {"description": "Upgrade required."}},
    )
    def create(self, request):
        # Refuse free users before looking at the payload.
        require_premium_access(request.user)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = create_booking(request.user, serializer.validated_data)
        return Response(
            self.get_serializer(booking).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=BookingStatusSerializer, responses={200: BookingSerializer})
    @action(
        detail=True,
        methods=["patch"],
        url_path="status",
        permission_classes=[IsPlatformAdmin],
    )
    def set_status(self, request, pk=None):
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = update_booking_status(int(pk), serializer.validated_data["status"])
        return Response(self.get_serializer(booking).data, status=status.HTTP_200_OK)
