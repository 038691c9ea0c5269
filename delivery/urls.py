from django.urls import path

from .views import DeliverySettingsView

urlpatterns = [
    path('', DeliverySettingsView.as_view(), name='delivery_settings'),
]
