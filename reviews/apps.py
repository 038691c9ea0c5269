"""Reviews app configuration."""

from django.apps import AppConfig


class ReviewsConfig(AppConfig):
    """Django app config for product reviews."""

    name = 'reviews'
