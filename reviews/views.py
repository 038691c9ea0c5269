"""Review API views.

Writes recompute the product's rating aggregates in the same transaction as
the review change, then drop the cached product payloads.
"""

import logging
import math

from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import parse_page_args
from products.cache import ProductCacheMixin
from products.models import Product
from .models import Review
from .serializers import ReviewInputSerializer, ReviewSerializer, ReviewWithProductSerializer
from .services import can_review, has_received_product, refresh_product_rating

logger = logging.getLogger(__name__)

CANNOT_REVIEW = {'canReview': False}


def parse_id(raw):
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


class ReviewView(ProductCacheMixin, APIView):
    """Product reviews: public list plus the signed-in user's own writes."""

    permission_classes = [AllowAny]

    def get(self, request):
        product_id = parse_id(request.query_params.get('productId'))
        if product_id is None:
            return Response({'error': 'productId is required'}, status=status.HTTP_400_BAD_REQUEST)

        page, limit, offset = parse_page_args(request.query_params, default_limit=5)
        reviews = Review.objects.filter(product_id=product_id).select_related('user')
        total = reviews.count()
        rows = list(reviews[offset:offset + limit])
        return Response({
            'reviews': ReviewSerializer(rows, many=True).data,
            'hasMore': total > offset + len(rows),
        })

    def post(self, request):
        if not request.user.is_authenticated:
            return Response(CANNOT_REVIEW)

        product_id = parse_id(request.data.get('productId'))
        if product_id is None:
            return Response({'error': 'Invalid product id'}, status=status.HTTP_400_BAD_REQUEST)
        if not Product.objects.filter(pk=product_id).exists():
            return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)

        if not has_received_product(request.user, product_id):
            logger.info("User %s may not review product %s", request.user.pk, product_id)
            return Response(CANNOT_REVIEW)
        if Review.objects.filter(user=request.user, product_id=product_id).exists():
            return Response(
                {'error': 'You have already reviewed this product'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = ReviewInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            with transaction.atomic():
                review = Review.objects.create(user=request.user, product_id=product_id, **serializer.validated_data)
                refresh_product_rating(product_id)
        except IntegrityError:
            return Response(
                {'error': 'You have already reviewed this product'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        self.get_product_cache().invalidate()
        logger.info("Review %s added to product %s by user %s", review.pk, product_id, request.user.pk)
        return Response(
            {'message': 'Review added successfully', 'review': ReviewSerializer(review).data},
            status=status.HTTP_201_CREATED,
        )

    def get_own_review(self, request, raw_id):
        review_id = parse_id(raw_id)
        if review_id is None:
            return None
        return Review.objects.filter(pk=review_id, user=request.user).first()

    def put(self, request):
        if not request.user.is_authenticated:
            return Response(CANNOT_REVIEW)

        review = self.get_own_review(request, request.data.get('reviewId'))
        if review is None:
            return Response({'error': 'Review not found'}, status=status.HTTP_404_NOT_FOUND)

        serializer = ReviewInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            for field, value in serializer.validated_data.items():
                setattr(review, field, value)
            review.save()
            refresh_product_rating(review.product_id)

        self.get_product_cache().invalidate()
        return Response({'message': 'Review updated', 'review': ReviewSerializer(review).data})

    def delete(self, request):
        if not request.user.is_authenticated:
            return Response(CANNOT_REVIEW)

        raw_id = request.data.get('reviewId') if hasattr(request.data, 'get') else None
        raw_id = raw_id or request.query_params.get('reviewId')
        if not raw_id:
            return Response({'error': 'reviewId is required'}, status=status.HTTP_400_BAD_REQUEST)

        review = self.get_own_review(request, raw_id)
        if review is None:
            return Response({'error': 'Review not found'}, status=status.HTTP_404_NOT_FOUND)

        product_id = review.product_id
        with transaction.atomic():
            review.delete()
            refresh_product_rating(product_id)

        self.get_product_cache().invalidate()
        logger.info("Review %s deleted by user %s", raw_id, request.user.pk)
        return Response({'message': 'Successfully deleted review'})


class CanReviewView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        product_id = parse_id(request.query_params.get('productId'))
        if product_id is None:
            return Response({'error': 'Invalid product id'}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'canReview': can_review(request.user, product_id)})


class AllReviewsView(APIView):
    """Every review in the store, newest first."""

    permission_classes = [AllowAny]

    def get(self, request):
        page, limit, offset = parse_page_args(request.query_params)
        reviews = Review.objects.select_related('user', 'product')
        total = reviews.count()
        return Response({
            'reviews': ReviewWithProductSerializer(reviews[offset:offset + limit], many=True).data,
            'total': total,
            'page': page,
            'totalPages': math.ceil(total / limit),
        })
