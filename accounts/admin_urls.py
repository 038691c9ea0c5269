"""Back-office user management routes (mounted under /api/admin/)."""

from django.urls import path

from .views import AdminUserDetailView, AdminUserListView, PeriodUserDetailView, PeriodUserListView

urlpatterns = [
    path('users/', AdminUserListView.as_view(), name='admin_users'),
    path('users/<int:user_id>/', AdminUserDetailView.as_view(), name='admin_user_detail'),
    path('period-users/', PeriodUserListView.as_view(), name='period_users'),
    path('period-users/<int:user_id>/', PeriodUserDetailView.as_view(), name='period_user_detail'),
]
