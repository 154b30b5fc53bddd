from rest_framework import serializers

from moorings.core.models import PlatformSetting


class PlatformSettingSerializer(serializers.ModelSerializer[PlatformSetting]):
    class Meta:
        model = PlatformSetting
        fields = ["key", "value", "description", "modified"]
        read_only_fields = ["key", "modified"]


class PlatformSettingUpsertSerializer(serializers.Serializer):
    value = serializers.CharField(allow_blank=True, trim_whitespace=True)
    description = serializers.CharField(
        required=False,
        allow_blank=True,
        default=None,
    )
