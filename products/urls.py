"""Catalog API routes (mounted under /api/)."""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import BrandViewSet, CategoryViewSet, ProductDetailView, ProductListView, ProductManageView

router = DefaultRouter()
router.register(r'brands', BrandViewSet, basename='brand')
router.register(r'categories', CategoryViewSet, basename='category')

urlpatterns = [
    path('products/', ProductListView.as_view(), name='product_list'),
    path('products/manage/<int:product_id>/', ProductManageView.as_view(), name='product_manage'),
    path('product/<int:product_id>/', ProductDetailView.as_view(), name='product_detail'),
    path('', include(router.urls)),
]
