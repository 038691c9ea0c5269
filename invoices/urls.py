from django.urls import path

from .views import (
    AdminInvoiceListView,
    InvoiceCleanupView,
    InvoiceDetailView,
    InvoiceDownloadView,
    InvoiceListView,
)

urlpatterns = [
    path('', InvoiceListView.as_view(), name='invoice-list'),
    path('admin/', AdminInvoiceListView.as_view(), name='admin-invoice-list'),
    path('cleanup/', InvoiceCleanupView.as_view(), name='invoice-cleanup'),
    path('<str:invoice_number>/', InvoiceDetailView.as_view(), name='invoice-detail'),
    path('<str:invoice_number>/download/', InvoiceDownloadView.as_view(), name='invoice-download'),
]
