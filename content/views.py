"""Home page features section API (mounted under /api/features-section/)."""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from .models import FeatureItem
from .serializers import FeatureItemSerializer

logger = logging.getLogger(__name__)


class FeaturesSectionView(APIView):
    """Public ordered list; admins add, edit (``id`` in the body) and delete (``?id=``)."""

    def get_permissions(self):
        if self.request.method in ('GET', 'HEAD', 'OPTIONS'):
            return [AllowAny()]
        return [IsAdminRole()]

    def get_item(self, raw_id):
        try:
            return FeatureItem.objects.filter(pk=int(raw_id)).first()
        except (TypeError, ValueError):
            return None

    def get(self, request):
        return Response(FeatureItemSerializer(FeatureItem.objects.all(), many=True).data)

    def post(self, request):
        serializer = FeatureItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = serializer.save()
        logger.info("Feature item %s created", item.pk)
        return Response(FeatureItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def put(self, request):
        item = self.get_item(request.data.get('id'))
        if item is None:
            return Response({'error': 'Feature not found'}, status=status.HTTP_404_NOT_FOUND)
        serializer = FeatureItemSerializer(item, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        item = serializer.save()
        return Response(FeatureItemSerializer(item).data)

    def delete(self, request):
        raw_id = request.query_params.get('id')
        if not raw_id:
            return Response({'error': 'Feature ID is required'}, status=status.HTTP_400_BAD_REQUEST)
        item = self.get_item(raw_id)
        if item is None:
            return Response({'error': 'Feature not found'}, status=status.HTTP_404_NOT_FOUND)
        item.delete()
        return Response({'success': True})
