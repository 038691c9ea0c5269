"""Products API views.

Includes the storefront product list, the cached product detail, the admin
edit endpoints and read-only brand and category listings.
Filtering/search/ordering/pagination are provided for list endpoints.
"""

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, generics, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrReadOnly, IsAdminRole
from core.i18n import resolve_language
from core.pagination import StandardResultsSetPagination
from core.slugs import unique_slugify
from .cache import ProductCacheMixin
from .models import Brand, Category, Product
from .serializers import (
    BrandSerializer,
    CategorySerializer,
    ProductSerializer,
    ProductWriteSerializer,
    localize_product,
    seed_specifications,
)

logger = logging.getLogger(__name__)

REQUIRED_PRODUCT_FIELDS = ('name', 'displayNames', 'brand', 'category')


def _reference_id(value):
    """Accept either a primary key or a nested ``{"id": ...}`` object."""
    if isinstance(value, dict):
        value = value.get('id')
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ProductListView(ProductCacheMixin, generics.ListCreateAPIView):
    """Storefront product list; admins may also create products here.

    Drafts are hidden unless an admin asks for ``?includeDrafts=true``.
    """

    serializer_class = ProductSerializer
    pagination_class = StandardResultsSetPagination
    permission_classes = [IsAdminOrReadOnly]

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['brand', 'category', 'featured']
    search_fields = ['name']
    ordering_fields = ['price', 'created_at', 'average_rating']

    def get_queryset(self):
        qs = Product.objects.select_related('brand', 'category')
        user = self.request.user
        include_drafts = self.request.query_params.get('includeDrafts') == 'true'
        if include_drafts and user.is_authenticated and user.is_admin:
            return qs
        return qs.filter(draft=False)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.method == 'GET':
            context['language'] = resolve_language(self.request.query_params.get('language'))
        return context

    def create(self, request, *args, **kwargs):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            product = serializer.save(user=request.user)
        self.get_product_cache().invalidate()
        logger.info("Product %s created by user %s", product.pk, request.user.pk)
        return Response({'product': ProductSerializer(product).data}, status=status.HTTP_201_CREATED)


class ProductDetailView(ProductCacheMixin, APIView):
    """Read-through cached product detail; admin update and delete."""

    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, product_id):
        language = resolve_language(request.query_params.get('language'))
        skip_cache = request.query_params.get('skipCache') == 'true'
        cache = self.get_product_cache()

        data = None if skip_cache else cache.get(product_id)
        if data is None:
            product = get_object_or_404(Product.objects.select_related('brand', 'category'), pk=product_id)
            data = ProductSerializer(product).data
            cache.set(product_id, data)

        return Response({'product': localize_product(data, language)})

    def put(self, request, product_id):
        payload = request.data

        missing = {field: not payload.get(field) for field in REQUIRED_PRODUCT_FIELDS}
        if any(missing.values()):
            return Response(
                {'error': 'Missing required fields', 'details': missing},
                status=status.HTTP_400_BAD_REQUEST,
            )

        with transaction.atomic():
            product = get_object_or_404(Product.objects.select_for_update(), pk=product_id)
            brand = Brand.objects.select_for_update().filter(pk=_reference_id(payload['brand'])).first()
            if brand is None:
                return Response({'error': 'Invalid brand reference'}, status=status.HTTP_400_BAD_REQUEST)
            category = Category.objects.select_for_update().filter(pk=_reference_id(payload['category'])).first()
            if category is None:
                return Response({'error': 'Invalid category reference'}, status=status.HTTP_400_BAD_REQUEST)

            data = {**payload, 'brand': brand.pk, 'category': category.pk}
            serializer = ProductWriteSerializer(product, data=data, partial=True)
            serializer.is_valid(raise_exception=True)
            product = serializer.save(user=request.user)
            product.slug = unique_slugify(product, product.name, fallback='product')
            product.save(update_fields=['slug'])

        self.get_product_cache().invalidate()
        logger.info("Product %s updated by user %s", product.pk, request.user.pk)
        return Response({'product': ProductSerializer(product).data})

    def delete(self, request, product_id):
        product = get_object_or_404(Product, pk=product_id)
        product.delete()
        self.get_product_cache().invalidate()
        return Response({'success': True, 'message': 'Product deleted'})


class BrandViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only active brands."""
    queryset = Brand.objects.filter(is_active=True)
    serializer_class = BrandSerializer
    pagination_class = None


class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only active categories."""
    queryset = Category.objects.filter(is_active=True)
    serializer_class = CategorySerializer
    pagination_class = None
