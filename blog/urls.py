"""Blog API routes (mounted under /api/blog/)."""

from django.urls import path

from .views import BlogPostDetailView, BlogPostListView, FeaturedBlogPostView

urlpatterns = [
    path('posts/', BlogPostListView.as_view(), name='blog_post_list'),
    path('posts/<str:key>/', BlogPostDetailView.as_view(), name='blog_post_detail'),
    path('featured/', FeaturedBlogPostView.as_view(), name='blog_featured'),
]
