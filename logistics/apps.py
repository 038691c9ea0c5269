"""Logistics app configuration."""

from django.apps import AppConfig


class LogisticsConfig(AppConfig):
    """Django app config for the delivery fleet."""

    name = 'logistics'
