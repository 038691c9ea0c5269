"""Blog API views."""

import logging
import math

from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from core.i18n import missing_languages
from core.pagination import parse_page_args
from .models import BlogPost
from .serializers import BlogPostSerializer

logger = logging.getLogger(__name__)


def post_queryset():
    return BlogPost.objects.select_related('author')


def missing_post_fields(data):
    """``None`` when the bilingual title, content and category are present."""

    details = {
        'title': missing_languages(data.get('title')),
        'content': missing_languages(data.get('content')),
        'category': not data.get('category'),
    }
    if any(details['title'].values()) or any(details['content'].values()) or details['category']:
        return details
    return None


class AdminWritesMixin:
    """Public reads, admin-only writes."""

    def get_permissions(self):
        if self.request.method in ('GET', 'HEAD', 'OPTIONS'):
            return [AllowAny()]
        return [IsAdminRole()]


class BlogPostListView(AdminWritesMixin, APIView):

    def get(self, request):
        as_admin = request.query_params.get('admin') == 'true'
        if as_admin and not (request.user.is_authenticated and request.user.is_admin):
            return Response(
                {'error': 'Unauthorized access - Admin privileges required'},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        posts = post_queryset()
        if not as_admin:
            posts = posts.filter(status=BlogPost.Status.PUBLISHED)
        if request.query_params.get('excludeFeatured') == 'true':
            posts = posts.filter(featured=False)

        page, limit, offset = parse_page_args(request.query_params)
        total = posts.count()
        return Response({
            'posts': BlogPostSerializer(posts[offset:offset + limit], many=True).data,
            'total': total,
            'page': page,
            'totalPages': math.ceil(total / limit),
        })

    def post(self, request):
        missing = missing_post_fields(request.data)
        if missing:
            return Response(
                {'error': 'Missing required fields', 'details': missing},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = BlogPostSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        extra = {'author': request.user}
        if serializer.validated_data.get('status') == BlogPost.Status.PUBLISHED:
            extra['published_at'] = timezone.now()
        post = serializer.save(**extra)
        logger.info("Blog post %s created by user %s", post.slug, request.user.pk)
        return Response({'post': BlogPostSerializer(post).data}, status=status.HTTP_201_CREATED)


class BlogPostDetailView(AdminWritesMixin, APIView):
    """One post, looked up by id or by slug."""

    def get_post(self, key):
        posts = post_queryset()
        post = posts.filter(pk=int(key)).first() if key.isdigit() else None
        return post or posts.filter(slug=key).first()

    def not_found(self):
        return Response({'error': 'Blog post not found'}, status=status.HTTP_404_NOT_FOUND)

    def get(self, request, key):
        post = self.get_post(key)
        if post is None:
            return self.not_found()
        return Response(BlogPostSerializer(post).data)

    def put(self, request, key):
        post = self.get_post(key)
        if post is None:
            return self.not_found()

        was_published = post.status == BlogPost.Status.PUBLISHED
        serializer = BlogPostSerializer(post, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        extra = {}
        if serializer.validated_data.get('status') == BlogPost.Status.PUBLISHED and not was_published:
            extra['published_at'] = timezone.now()
        post = serializer.save(**extra)
        return Response(BlogPostSerializer(post).data)

    def delete(self, request, key):
        post = self.get_post(key)
        if post is None:
            return self.not_found()
        post.delete()
        logger.info("Blog post %s deleted by user %s", key, request.user.pk)
        return Response({'success': True})


class FeaturedBlogPostView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        post = (
            post_queryset()
            .filter(featured=True, status=BlogPost.Status.PUBLISHED)
            .order_by('-published_at', '-created_at')
            .first()
        )
        if post is None:
            return Response({'error': 'No featured post found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(BlogPostSerializer(post).data)
