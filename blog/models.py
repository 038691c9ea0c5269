"""Database models for the bilingual blog."""

from django.conf import settings
from django.db import models, transaction

from core.i18n import empty_bilingual
from core.slugs import unique_slugify


def default_seo():
    return {'metaTitle': empty_bilingual(), 'metaDescription': empty_bilingual(), 'keywords': []}


class BlogPost(models.Model):
    """A blog article with ``en`` and ``zh-TW`` variants of its text.

    The slug follows the English title and is regenerated when that title
    changes. Only one post can be featured at a time.
    """

    class Status(models.TextChoices):
        DRAFT = 'draft', 'Draft'
        PUBLISHED = 'published', 'Published'

    title = models.JSONField(default=empty_bilingual)
    slug = models.SlugField(max_length=200, unique=True, blank=True, allow_unicode=True)
    content = models.JSONField(default=empty_bilingual)
    excerpt = models.JSONField(default=empty_bilingual, blank=True)
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='blog_posts',
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.DRAFT)
    featured = models.BooleanField(default=False)
    main_image = models.URLField(max_length=500, blank=True)
    tags = models.JSONField(default=list, blank=True)
    category = models.CharField(max_length=100)
    published_at = models.DateTimeField(null=True, blank=True)
    seo = models.JSONField(default=default_seo, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-published_at', '-created_at']
        indexes = [
            models.Index(fields=['status', 'published_at'], name='blogpost_status_pub_idx'),
            models.Index(fields=['category', 'status'], name='blogpost_category_idx'),
        ]

    def __str__(self):
        return self.slug or (self.title or {}).get('en', '')

    def _title_changed(self):
        if not self.pk:
            return True
        previous = type(self).objects.filter(pk=self.pk).values_list('title', flat=True).first()
        return (previous or {}).get('en') != (self.title or {}).get('en')

    def save(self, *args, **kwargs):
        with transaction.atomic():
            if not self.slug or self._title_changed():
                self.slug = unique_slugify(self, (self.title or {}).get('en'), fallback='post')
            if self.featured:
                type(self).objects.exclude(pk=self.pk).filter(featured=True).update(featured=False)
            super().save(*args, **kwargs)
