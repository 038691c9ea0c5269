"""Delivery settings endpoint.

``GET`` is public (checkout needs the methods); ``POST`` replaces the
settings and is limited to store administrators.
"""

import logging

from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrReadOnly
from .models import DeliverySettings
from .serializers import DeliverySettingsSerializer

logger = logging.getLogger(__name__)


class DeliverySettingsView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        settings = DeliverySettings.get_or_create_default()
        return Response(DeliverySettingsSerializer(settings).data)

    def post(self, request):
        settings = DeliverySettings.load()
        serializer = DeliverySettingsSerializer(settings, data=request.data, partial=settings is not None)
        serializer.is_valid(raise_exception=True)
        settings = serializer.save()
        logger.info(
            "Delivery settings updated by user %s: %d methods, free over %s",
            request.user.pk, len(settings.delivery_methods), settings.free_delivery_threshold,
        )
        return Response(DeliverySettingsSerializer(settings).data)
