"""Review API routes (mounted under /api/review/)."""

from django.urls import path

from .views import AllReviewsView, CanReviewView, ReviewView

urlpatterns = [
    path('', ReviewView.as_view(), name='review'),
    path('can-review/', CanReviewView.as_view(), name='review_can_review'),
    path('all/', AllReviewsView.as_view(), name='review_all'),
]
