"""Serializers for the product catalog.

Output keys follow the storefront's camelCase naming. Bilingual fields are
returned in full; when a ``language`` is present in the serializer context,
``name``/``description`` are additionally resolved to that language.
"""

import copy

from rest_framework import serializers

from core.i18n import SUPPORTED_LANGUAGES, empty_bilingual, localized
from core.icons import icon_payload
from .models import Brand, Category, Product


def localize_specifications(specs, language, include_prices=False):
    """Attach a display ``label`` to every specification entry."""

    result = []
    for spec in specs or []:
        if not isinstance(spec, dict):
            continue
        entry = dict(spec)
        if spec.get('type') == 'select' and spec.get('options'):
            options = spec['options']
            entry['options'] = {code: options.get(code) or [] for code in SUPPORTED_LANGUAGES}
            if include_prices:
                entry['options']['prices'] = options.get('prices') or []
        else:
            entry.pop('options', None)
        entry['label'] = localized(spec.get('displayNames'), language, spec.get('key', ''))
        result.append(entry)
    return result


def localize_product(data, language):
    """Resolve a serialized product's names to ``language``.

    Works on a copy so a cached payload is never mutated.
    """

    data = copy.deepcopy(data)
    data['name'] = localized(data.get('displayNames'), language, data.get('name'))
    data['description'] = localized(data.get('descriptions'), language, data.get('description'))

    brand = data.get('brand')
    if isinstance(brand, dict):
        brand['name'] = localized(brand.get('displayNames'), language, brand.get('name'))

    category = data.get('category')
    if isinstance(category, dict):
        category['name'] = localized(category.get('displayNames'), language, category.get('name'))
        category['specifications'] = localize_specifications(
            category.get('specifications'), language, include_prices=True,
        )

    data['specifications'] = localize_specifications(data.get('specifications'), language)
    return data


class BrandSerializer(serializers.ModelSerializer):
    """Brand with its resolved icon."""

    displayNames = serializers.JSONField(source='display_names')
    isActive = serializers.BooleanField(source='is_active')
    icon = serializers.SerializerMethodField()

    class Meta:
        model = Brand
        fields = ['id', 'name', 'slug', 'displayNames', 'descriptions', 'isActive', 'order', 'icon']

    def get_icon(self, obj):
        return icon_payload(obj.icon)


class CategorySerializer(serializers.ModelSerializer):
    """Category with specification templates and resolved icon."""

    displayNames = serializers.JSONField(source='display_names')
    isActive = serializers.BooleanField(source='is_active')
    icon = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'displayNames', 'specifications', 'isActive', 'icon']

    def get_icon(self, obj):
        return icon_payload(obj.icon)


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer: product with nested brand and category."""

    displayNames = serializers.JSONField(source='display_names')
    originalPrice = serializers.DecimalField(source='original_price', max_digits=12, decimal_places=2, allow_null=True)
    averageRating = serializers.DecimalField(source='average_rating', max_digits=3, decimal_places=2)
    numReviews = serializers.IntegerField(source='num_reviews')
    brand = BrandSerializer(read_only=True)
    category = CategorySerializer(read_only=True)
    user = serializers.PrimaryKeyRelatedField(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'displayNames', 'description', 'descriptions',
            'price', 'originalPrice', 'images', 'brand', 'category', 'stock',
            'averageRating', 'numReviews', 'draft', 'featured', 'specifications',
            'user', 'createdAt', 'updatedAt',
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        language = self.context.get('language')
        if language:
            data = localize_product(data, language)
        return data


class ProductWriteSerializer(serializers.ModelSerializer):
    """Write serializer used by the admin product endpoints."""

    displayNames = serializers.JSONField(source='display_names', required=False)
    originalPrice = serializers.DecimalField(
        source='original_price', max_digits=12, decimal_places=2, allow_null=True, required=False,
    )
    images = serializers.ListField(child=serializers.URLField(), required=False)
    specifications = serializers.ListField(child=serializers.DictField(), required=False)
    descriptions = serializers.JSONField(required=False)

    class Meta:
        model = Product
        fields = [
            'name', 'displayNames', 'description', 'descriptions', 'price', 'originalPrice',
            'images', 'brand', 'category', 'stock', 'draft', 'featured', 'specifications',
        ]

    def _validate_bilingual(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Expected an object keyed by language code.")
        return {code: str(value.get(code) or '') for code in SUPPORTED_LANGUAGES}

    def validate_displayNames(self, value):
        return self._validate_bilingual(value)

    def validate_descriptions(self, value):
        return self._validate_bilingual(value or empty_bilingual())


def seed_specifications(product):
    """Blank product specifications built from the category's templates."""

    seeded = []
    for spec in product.category.specifications or []:
        if not isinstance(spec, dict):
            continue
        key = spec.get('key') or str(spec.get('label') or '').lower().replace(' ', '_')
        seeded.append({
            'key': key,
            'value': empty_bilingual(),
            'type': spec.get('type') or 'text',
            'displayNames': spec.get('displayNames') or {code: key for code in SUPPORTED_LANGUAGES},
        })
    return seeded
