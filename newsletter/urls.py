"""Newsletter API routes (mounted under /api/newsletter/)."""

from django.urls import path

from .views import SubscribeView, SubscriberDetailView, SubscriberListView

urlpatterns = [
    path('subscribe/', SubscribeView.as_view(), name='newsletter_subscribe'),
    path('subscribers/', SubscriberListView.as_view(), name='newsletter_subscribers'),
    path('subscribers/<int:pk>/', SubscriberDetailView.as_view(), name='newsletter_subscriber_detail'),
]
