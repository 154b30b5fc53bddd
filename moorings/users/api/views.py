from drf_spectacular.utils import extend_schema
from rest_framework import mixins
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from moorings.core.permissions import IsPlatformAdmin
from moorings.users.models import User

from .serializers import UserSerializer


class AuthMeView(APIView):
    """
    Get the currently authenticated user's account and subscription summary.

    Clients use this to decide whether to show upgrade prompts.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get current user info",
        responses={
            200: UserSerializer,
            403: {"description": "Authentication credentials were not provided."},
        },
        tags=["Authentication"],
    )
    def get(self, request):
        serializer = UserSerializer(request.user, context={"request": request})
        return Response(serializer.data, status=status.HTTP_200_OK)


@extend_schema(tags=["Admin"])
class AdminUserViewSet(mixins.ListModelMixin, GenericViewSet):
    """Read-only user listing for platform admins."""

    serializer_class = UserSerializer
    permission_classes = [IsPlatformAdmin]
    queryset = User.objects.order_by("-date_joined")
