"""Serializers for blog posts."""

from rest_framework import serializers

from core.i18n import normalize_bilingual
from .models import BlogPost, default_seo


class BlogAuthorSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(source='display_name')
    email = serializers.EmailField()


class BlogPostSerializer(serializers.ModelSerializer):
    """Blog post as shown on the storefront and in the admin editor."""

    author = BlogAuthorSerializer(read_only=True, allow_null=True)
    mainImage = serializers.URLField(source='main_image', required=False, allow_blank=True, max_length=500)
    publishedAt = serializers.DateTimeField(source='published_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)

    class Meta:
        model = BlogPost
        fields = [
            'id', 'title', 'slug', 'content', 'excerpt', 'author', 'status', 'featured',
            'mainImage', 'tags', 'category', 'publishedAt', 'seo', 'createdAt', 'updatedAt',
        ]
        read_only_fields = ['id', 'slug']

    def validate_title(self, value):
        return normalize_bilingual(value)

    def validate_content(self, value):
        return normalize_bilingual(value)

    def validate_excerpt(self, value):
        return normalize_bilingual(value)

    def validate_tags(self, value):
        return [tag.strip() for tag in value if tag.strip()]

    def validate_seo(self, value):
        value = value if isinstance(value, dict) else {}
        seo = default_seo()
        seo['metaTitle'] = normalize_bilingual(value.get('metaTitle'))
        seo['metaDescription'] = normalize_bilingual(value.get('metaDescription'))
        keywords = value.get('keywords')
        seo['keywords'] = [str(word).strip() for word in keywords if str(word).strip()] if isinstance(keywords, list) else []
        return seo
