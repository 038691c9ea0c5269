"""Invoice API views."""

import logging
from decimal import Decimal

import django_filters
from django.http import HttpResponse
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole, IsBackOfficeRole
from core.documents import LABELS, document_lines, render_document
from core.i18n import localized, resolve_language
from core.pagination import StandardResultsSetPagination
from .models import Invoice
from .serializers import InvoiceListSerializer, InvoiceSerializer
from .services import cleanup_invoices, parse_payment_date

logger = logging.getLogger(__name__)


def invoice_queryset():
    return Invoice.objects.select_related('user').prefetch_related(
        'orders__items__product', 'items__product',
    )


class InvoiceFilter(django_filters.FilterSet):
    invoiceType = django_filters.ChoiceFilter(field_name='invoice_type', choices=Invoice.InvoiceType.choices)
    status = django_filters.ChoiceFilter(choices=Invoice.Status.choices)

    class Meta:
        model = Invoice
        fields = ['status', 'invoiceType']


class InvoiceListView(generics.ListAPIView):
    """The signed-in user's invoices."""

    serializer_class = InvoiceListSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = InvoiceFilter

    def get_queryset(self):
        return invoice_queryset().filter(user=self.request.user)


class AdminInvoiceListView(InvoiceListView):
    """Back-office list of every invoice."""

    permission_classes = [IsBackOfficeRole]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['invoice_number', 'name', 'email']
    ordering_fields = ['created_at', 'amount', 'period_end']

    def get_queryset(self):
        return invoice_queryset()


class InvoiceDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_invoice(self, request, invoice_number, allow_back_office=True):
        queryset = invoice_queryset().filter(invoice_number=invoice_number)
        if not (allow_back_office and request.user.is_back_office):
            queryset = queryset.filter(user=request.user)
        return queryset.first()

    def not_found(self):
        return Response({'error': 'Invoice not found'}, status=status.HTTP_404_NOT_FOUND)

    def get(self, request, invoice_number):
        invoice = self.get_invoice(request, invoice_number)
        if invoice is None:
            return self.not_found()
        return Response({'invoice': InvoiceSerializer(invoice).data})

    def patch(self, request, invoice_number):
        """Attach a payment proof to the caller's invoice."""

        invoice = self.get_invoice(request, invoice_number, allow_back_office=False)
        if invoice is None:
            return self.not_found()

        invoice.payment_proof_url = request.data.get('paymentProofUrl') or ''
        invoice.payment_date = parse_payment_date(request.data.get('paymentDate'), default=timezone.now())
        invoice.full_clean()
        invoice.save(update_fields=['payment_proof_url', 'payment_date', 'updated_at'])
        logger.info("Payment proof attached to invoice %s by user %s", invoice.invoice_number, request.user.pk)

        invoice = self.get_invoice(request, invoice_number, allow_back_office=False)
        return Response({'success': True, 'invoice': InvoiceSerializer(invoice).data})


class InvoiceCleanupView(APIView):
    """Drop empty period invoices and recompute stale amounts."""

    permission_classes = [IsAdminRole]

    def post(self, request):
        result = cleanup_invoices()
        return Response({'success': True, **result})


class InvoiceDownloadView(InvoiceDetailView):
    """The invoice as a printable HTML attachment."""

    http_method_names = ['get', 'head', 'options']

    def get(self, request, invoice_number):
        invoice = self.get_invoice(request, invoice_number)
        if invoice is None:
            return self.not_found()

        language = resolve_language(request.query_params.get('language') or request.user.language)
        lines = document_lines(invoice.items.all(), language, LABELS[language]['missing_product'])
        subtotal = invoice.subtotal if invoice.subtotal is not None else sum(
            (line['total'] for line in lines), Decimal('0'),
        )
        html = render_document(
            'invoices/documents/invoice.html', language,
            invoice=invoice,
            lines=lines,
            address=localized(invoice.shipping_address or invoice.billing_address, language),
            subtotal=subtotal,
            delivery_cost=invoice.delivery_cost or Decimal('0'),
            total=invoice.total if invoice.total is not None else invoice.amount,
        )
        response = HttpResponse(html, content_type='text/html; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="invoice-{invoice.invoice_number}.html"'
        return response
