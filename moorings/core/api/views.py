"""
Platform settings API.

The public endpoint exposes only the typed pricing view; admins can list and
upsert any raw key.
"""

from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import inline_serializer
from rest_framework import serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from moorings.core.api.serializers import PlatformSettingSerializer
from moorings.core.api.serializers import PlatformSettingUpsertSerializer
from moorings.core.models import PlatformSetting
from moorings.core.permissions import IsPlatformAdmin
from moorings.core.site_settings import get_public_settings
from moorings.core.site_settings import set_setting


class PublicSettingsView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        summary="Get public pricing settings",
        responses={
            200: inline_serializer(
                name="PublicSettingsResponse",
                fields={
                    "premium_price": serializers.CharField(),
                    "trial_days": serializers.IntegerField(),
                },
            ),
        },
        tags=["Settings"],
    )
    def get(self, request):
        return Response(get_public_settings(), status=status.HTTP_200_OK)


class AdminSettingsView(APIView):
    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="List all platform settings",
        responses={200: PlatformSettingSerializer(many=True)},
        tags=["Admin"],
    )
    def get(self, request):
        serializer = PlatformSettingSerializer(
            PlatformSetting.objects.all(),
            many=True,
        )
        return Response(serializer.data, status=status.HTTP_200_OK)


class AdminSettingDetailView(APIView):
    permission_classes = [IsPlatformAdmin]

    @extend_schema(
        summary="Create or update a platform setting",
        request=PlatformSettingUpsertSerializer,
        responses={200: PlatformSettingSerializer},
        tags=["Admin"],
    )
    def put(self, request, key: str):
        serializer = PlatformSettingUpsertSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        setting = set_setting(
            key,
            serializer.validated_data["value"],
            description=serializer.validated_data.get("description"),
        )
        return Response(
            PlatformSettingSerializer(setting).data,
            status=status.HTTP_200_OK,
        )
