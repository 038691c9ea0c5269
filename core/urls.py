"""
URL configuration for the storefront project.

Every API lives under ``/api/``; the Django admin stays at ``/admin/`` and the
OpenAPI documents are served by drf-spectacular and drf-yasg.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView
from drf_yasg import openapi
from drf_yasg.views import get_schema_view

from orders.views import CheckoutView


schema_view = get_schema_view(
   openapi.Info(title="Storefront API", default_version='v1'),
   public=True,
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/accounts/', include('accounts.urls')),
    path('api/admin/', include('accounts.admin_urls')),
    path('api/delivery/', include('delivery.urls')),
    path('api/checkout/', CheckoutView.as_view(), name='checkout'),
    path('api/orders/', include('orders.urls')),
    path('api/invoices/', include('invoices.urls')),
    path('api/review/', include('reviews.urls')),
    path('api/blog/', include('blog.urls')),
    path('api/newsletter/', include('newsletter.urls')),
    path('api/features-section/', include('content.urls')),
    path('api/logistics/', include('logistics.urls')),
    # Swagger Documentation
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0)),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
    # Catalog routes sit directly under /api/ (products/, product/<id>/, brands/, categories/).
    path('api/', include('products.urls')),
]
