from django.urls import path

from .views import FeaturesSectionView

urlpatterns = [
    path('', FeaturesSectionView.as_view(), name='features_section'),
]
