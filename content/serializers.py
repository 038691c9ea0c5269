from rest_framework import serializers

from core.i18n import missing_languages, normalize_bilingual
from core.icons import icon_payload
from .models import FeatureItem


def bilingual_required(value):
    missing = [code for code, absent in missing_languages(value).items() if absent]
    if missing:
        raise serializers.ValidationError(f"Missing translations: {', '.join(missing)}")
    return normalize_bilingual(value)


class FeatureItemSerializer(serializers.ModelSerializer):
    """Feature tile; ``icon`` is written as a string and read back resolved."""

    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = FeatureItem
        fields = ['id', 'icon', 'title', 'description', 'order', 'createdAt', 'updatedAt']

    def validate_icon(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("An icon is required.")
        return value

    def validate_title(self, value):
        return bilingual_required(value)

    def validate_description(self, value):
        return bilingual_required(value)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['icon'] = icon_payload(instance.icon)
        return data
