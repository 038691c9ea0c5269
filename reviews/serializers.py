from rest_framework import serializers

from .models import Review


class ReviewUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(source='display_name')


class ReviewSerializer(serializers.ModelSerializer):
    user = ReviewUserSerializer(read_only=True)
    productId = serializers.IntegerField(source='product_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'user', 'productId', 'rating', 'comment', 'image', 'createdAt', 'updatedAt']


class ReviewWithProductSerializer(ReviewSerializer):
    """Review row for the store-wide list, with the product's name and images."""

    product = serializers.SerializerMethodField()

    class Meta(ReviewSerializer.Meta):
        fields = ReviewSerializer.Meta.fields + ['product']

    def get_product(self, obj):
        return {'id': obj.product_id, 'name': obj.product.name, 'images': obj.product.images}


class ReviewInputSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField()
    image = serializers.URLField(required=False, allow_blank=True, max_length=500)
