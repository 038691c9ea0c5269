"""Newsletter API views."""

import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from .models import Subscriber
from .serializers import SubscribeSerializer, SubscriberSerializer

logger = logging.getLogger(__name__)


class SubscribeView(APIView):
    """Public sign-up form; re-subscribing reactivates an old address."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = SubscribeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Invalid email address'}, status=status.HTTP_400_BAD_REQUEST)

        email = serializer.validated_data['email']
        existing = Subscriber.objects.filter(email=email).first()
        if existing is not None:
            if existing.is_active:
                return Response({'error': 'Email is already subscribed'}, status=status.HTTP_400_BAD_REQUEST)
            existing.set_active(True)
            logger.info("Newsletter subscription reactivated for subscriber %s", existing.pk)
            return Response({'message': 'Subscription reactivated successfully'})

        subscriber = Subscriber.objects.create(
            email=email,
            source=serializer.validated_data.get('source') or 'website',
        )
        logger.info("New newsletter subscriber %s", subscriber.pk)
        return Response({'message': 'Subscribed successfully'}, status=status.HTTP_201_CREATED)


class SubscriberListView(generics.ListAPIView):
    permission_classes = [IsAdminRole]
    serializer_class = SubscriberSerializer
    queryset = Subscriber.objects.all()
    pagination_class = None


class SubscriberDetailView(APIView):
    permission_classes = [IsAdminRole]

    def patch(self, request, pk):
        subscriber = get_object_or_404(Subscriber, pk=pk)
        serializer = SubscriberSerializer(subscriber, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if 'is_active' in serializer.validated_data:
            subscriber.set_active(serializer.validated_data['is_active'])
        return Response(SubscriberSerializer(subscriber).data)

    def delete(self, request, pk):
        subscriber = get_object_or_404(Subscriber, pk=pk)
        subscriber.delete()
        return Response({'success': True})
