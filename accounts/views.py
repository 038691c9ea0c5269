"""Accounts app views.

Contains:
- Auth-related API endpoints (register)
- The signed-in user's profile
- Back-office management of users and their period billing

Kept intentionally simple and DRF-native.
"""

import logging

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .permissions import IsAdminRole
from .serializers import AdminUserSerializer, PeriodUserSerializer, RegisterSerializer, UserProfileSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class RegisterView(generics.CreateAPIView):
    """Public registration endpoint."""
    queryset = User.objects.all()
    permission_classes = [AllowAny]
    serializer_class = RegisterSerializer

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info("Registered user %s", user.pk)


class UserProfileViewSet(viewsets.GenericViewSet):
    """Authenticated profile management through ``me``."""
    permission_classes = [IsAuthenticated]
    serializer_class = UserProfileSerializer

    @action(detail=False, methods=['get', 'put'])
    def me(self, request):
        """Get or update the authenticated user's profile."""
        user = request.user
        if request.method == 'GET':
            serializer = self.get_serializer(user)
            return Response(serializer.data)

        serializer = self.get_serializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class PeriodUserListView(generics.ListAPIView):
    """Admin: users flagged for period billing (``?all=true`` lists everyone)."""
    permission_classes = [IsAdminRole]
    serializer_class = PeriodUserSerializer
    pagination_class = None

    def get_queryset(self):
        qs = User.objects.prefetch_related('payment_history__invoice').order_by('email')
        if self.request.query_params.get('all') == 'true':
            return qs
        return qs.filter(is_period_paid_user=True)


class PeriodUserDetailView(APIView):
    """Admin: toggle ``isPeriodPaidUser`` / ``paymentPeriod`` for one user."""
    permission_classes = [IsAdminRole]

    def put(self, request, user_id):
        user = get_object_or_404(User, pk=user_id)
        serializer = PeriodUserSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(
            "Period billing for user %s set to %s (%s)",
            user.pk, user.is_period_paid_user, user.payment_period,
        )
        return Response({'success': True, 'user': serializer.data}, status=status.HTTP_200_OK)


class AdminUserListView(APIView):
    """Admin: every user (GET) and creating back-office or customer accounts (POST)."""
    permission_classes = [IsAdminRole]

    def get(self, request):
        users = User.objects.order_by('email')
        return Response({'users': AdminUserSerializer(users, many=True).data})

    def post(self, request):
        if not all(request.data.get(field) for field in ('name', 'email', 'password')):
            return Response({'error': 'Missing required fields'}, status=status.HTTP_400_BAD_REQUEST)
        if User.objects.filter(email__iexact=str(request.data['email']).strip()).exists():
            return Response({'error': 'User already exists'}, status=status.HTTP_409_CONFLICT)

        serializer = AdminUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s created by admin %s with role %s", user.pk, request.user.pk, user.role)
        return Response(
            {'message': 'User created successfully', 'user': AdminUserSerializer(user).data},
            status=status.HTTP_201_CREATED,
        )


class AdminUserDetailView(APIView):
    """Admin: change a user's ``role``/``admin`` flag, or delete the account."""
    permission_classes = [IsAdminRole]

    def not_found(self):
        return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

    def patch(self, request, user_id):
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            return self.not_found()
        data = {key: request.data[key] for key in ('role', 'admin') if key in request.data}
        serializer = AdminUserSerializer(user, data=data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s now has role %s (staff=%s)", user.pk, user.role, user.is_staff)
        return Response(serializer.data)

    def delete(self, request, user_id):
        if user_id == request.user.pk:
            return Response({'error': 'Cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            return self.not_found()
        user.delete()
        logger.info("User %s deleted by admin %s", user_id, request.user.pk)
        return Response({'message': 'User deleted successfully'})
