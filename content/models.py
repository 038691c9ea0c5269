"""Home page content blocks."""

from django.db import models

from core.i18n import empty_bilingual


class FeatureItem(models.Model):
    """One tile of the home page features section.

    ``icon`` keeps the string typed in the admin; the API resolves it to an
    icon source when serializing.
    """

    icon = models.TextField()
    title = models.JSONField(default=empty_bilingual)
    description = models.JSONField(default=empty_bilingual)
    order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return (self.title or {}).get('en') or f"Feature {self.pk}"
