from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework.permissions import AllowAny
from rest_framework.viewsets import ReadOnlyModelViewSet

from moorings.billing.entitlements import has_premium_access
from moorings.locations.filters import MooringLocationFilter
from moorings.locations.models import MooringLocation
from moorings.locations.redaction import DETAIL_DESCRIPTION_LIMIT
from moorings.locations.redaction import LIST_DESCRIPTION_LIMIT
from moorings.locations.serializers import MooringLocationSerializer


@extend_schema_view(
    list=extend_schema(summary="List mooring locations"),
    retrieve=extend_schema(summary="Get a mooring location"),
)
@extend_schema(tags=["Locations"])
class MooringLocationViewSet(ReadOnlyModelViewSet):
    """
    Public location directory.

    Premium fields are redacted for anonymous and free users; filtered and
    unfiltered results go through the same redaction.
    """

    serializer_class = MooringLocationSerializer
    permission_classes = [AllowAny]
    queryset = MooringLocation.objects.all()
    filter_backends = [DjangoFilterBackend]
    filterset_class = MooringLocationFilter

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["is_premium"] = has_premium_access(self.request.user)
        context["description_limit"] = (
            DETAIL_DESCRIPTION_LIMIT
            if self.action == "retrieve"
            else LIST_DESCRIPTION_LIMIT
        )
        return context
