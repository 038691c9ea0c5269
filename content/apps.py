"""Content app configuration."""

from django.apps import AppConfig


class ContentConfig(AppConfig):
    """Django app config for home page content blocks."""

    name = 'content'
