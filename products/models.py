"""Database models for the product catalog."""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.i18n import empty_bilingual
from core.slugs import unique_slugify


class Brand(models.Model):
    """Product brand shown in the storefront filters."""

    name = models.CharField(max_length=255, unique=True)
    slug = models.SlugField(max_length=255, unique=True, blank=True, allow_unicode=True)
    display_names = models.JSONField(default=empty_bilingual, blank=True)
    descriptions = models.JSONField(default=empty_bilingual, blank=True)
    is_active = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=0)
    icon = models.TextField(blank=True)

    class Meta:
        ordering = ['order', 'name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slugify(self, self.name, fallback='brand')
        super().save(*args, **kwargs)


class Category(models.Model):
    """Product category.

    ``specifications`` is the list of attribute templates
    (``{key, displayNames, type, options, required}``) a product of this
    category is expected to fill in.
    """

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True, allow_unicode=True)
    display_names = models.JSONField(default=empty_bilingual, blank=True)
    specifications = models.JSONField(default=list, blank=True)
    icon = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name_plural = "Categories"
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slugify(self, self.name, fallback='category')
        super().save(*args, **kwargs)


class Product(models.Model):
    """A sellable catalog entry.

    Images are hosted elsewhere; ``images`` only keeps their URLs.
    """

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True, allow_unicode=True)
    display_names = models.JSONField(default=empty_bilingual, blank=True)
    description = models.TextField(blank=True)
    descriptions = models.JSONField(default=empty_bilingual, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    original_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    images = models.JSONField(default=list, blank=True)
    brand = models.ForeignKey(Brand, on_delete=models.PROTECT, related_name='products')
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')
    stock = models.PositiveIntegerField(default=0)
    average_rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    num_reviews = models.PositiveIntegerField(default=0)
    draft = models.BooleanField(default=False)
    featured = models.BooleanField(default=False)
    specifications = models.JSONField(default=list, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='edited_products',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slugify(self, self.name, fallback='product')
        super().save(*args, **kwargs)
