"""Order API routes (mounted under /api/orders/)."""

from django.urls import path

from .views import AdminOrderListView, OrderDetailView, OrderListView, OrderPrintView

urlpatterns = [
    path('', OrderListView.as_view(), name='order_list'),
    path('admin/', AdminOrderListView.as_view(), name='order_admin_list'),
    path('<int:order_id>/', OrderDetailView.as_view(), name='order_detail'),
    path('<int:order_id>/print/', OrderPrintView.as_view(), name='order_print'),
]
