"""Blog app configuration."""

from django.apps import AppConfig


class BlogConfig(AppConfig):
    """Django app config for blog posts."""

    name = 'blog'
