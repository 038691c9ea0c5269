"""Slug helpers shared by catalog and blog models."""

from django.utils.text import slugify


def unique_slugify(instance, source, slug_field='slug', fallback='item'):
    """Return a slug for ``source`` that is unique for ``instance``'s model.

    Collisions get ``-1``, ``-2``... suffixes. The instance itself is excluded
    so re-saving an unchanged object keeps its slug.
    """

    base = slugify(source or '', allow_unicode=True) or fallback
    model = type(instance)
    max_length = model._meta.get_field(slug_field).max_length

    base = base[:max_length]
    qs = model._default_manager.all()
    if instance.pk:
        qs = qs.exclude(pk=instance.pk)

    candidate = base
    counter = 1
    while qs.filter(**{slug_field: candidate}).exists():
        suffix = f'-{counter}'
        candidate = f'{base[:max_length - len(suffix)]}{suffix}'
        counter += 1
    return candidate
