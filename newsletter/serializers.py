from rest_framework import serializers

from .models import Subscriber


class SubscribeSerializer(serializers.Serializer):
    email = serializers.EmailField()
    source = serializers.CharField(max_length=50, required=False, allow_blank=True)

    def validate_email(self, value):
        return value.strip().lower()


class SubscriberSerializer(serializers.ModelSerializer):
    isActive = serializers.BooleanField(source='is_active')
    subscribedAt = serializers.DateTimeField(source='subscribed_at', read_only=True)
    unsubscribedAt = serializers.DateTimeField(source='unsubscribed_at', read_only=True)

    class Meta:
        model = Subscriber
        fields = ['id', 'email', 'source', 'isActive', 'subscribedAt', 'unsubscribedAt', 'preferences']
        read_only_fields = ['id', 'email', 'source', 'preferences']
