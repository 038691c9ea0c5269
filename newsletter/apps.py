"""Newsletter app configuration."""

from django.apps import AppConfig


class NewsletterConfig(AppConfig):
    """Django app config for newsletter subscriptions."""

    name = 'newsletter'
