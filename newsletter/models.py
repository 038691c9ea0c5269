"""Newsletter subscribers."""

from django.db import models
from django.utils import timezone


def default_preferences():
    return {'marketing': True, 'updates': True, 'promotions': True}


class Subscriber(models.Model):
    email = models.EmailField(unique=True)
    source = models.CharField(max_length=50, default='website')
    is_active = models.BooleanField(default=True)
    subscribed_at = models.DateTimeField(default=timezone.now)
    unsubscribed_at = models.DateTimeField(null=True, blank=True)
    preferences = models.JSONField(default=default_preferences, blank=True)

    class Meta:
        ordering = ['-subscribed_at']
        indexes = [
            models.Index(fields=['is_active', 'subscribed_at'], name='subscriber_active_idx'),
        ]

    def __str__(self):
        return self.email

    def save(self, *args, **kwargs):
        self.email = (self.email or '').strip().lower()
        super().save(*args, **kwargs)

    def set_active(self, active):
        self.is_active = active
        self.unsubscribed_at = None if active else timezone.now()
        self.save(update_fields=['is_active', 'unsubscribed_at'])
