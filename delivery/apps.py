"""Delivery app configuration."""

from django.apps import AppConfig


class DeliveryConfig(AppConfig):
    """Django app config for delivery settings."""

    name = 'delivery'
