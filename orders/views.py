"""Orders API views.

Includes:
- Checkout (cart -> order + invoice)
- Order detail with repair of period-invoice linkage, status updates and delete
- Customer order history and the back-office order list
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, generics, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsBackOfficeRole
from core.documents import LABELS, document_lines, render_document
from core.i18n import localized, resolve_language
from core.pagination import StandardResultsSetPagination
from delivery.models import DeliverySettings
from invoices.models import Invoice
from invoices.services import remove_order_from_invoices
from .checkout import CheckoutError, place_order
from .models import Order
from .serializers import OrderSerializer
from .signals import broadcast_order_update, order_status_changed

logger = logging.getLogger(__name__)


def order_queryset():
    return Order.objects.select_related('user').prefetch_related('items__product')


class CheckoutView(APIView):
    """Place an order for the signed-in user."""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        try:
            order = place_order(request.user, request.data)
        except CheckoutError as exc:
            logger.warning("Checkout rejected for user %s: %s %s", request.user.pk, exc.error, exc.details)
            return Response(exc.as_response_body(), status=exc.status_code)
        return Response({'success': True, 'orderId': order.pk}, status=status.HTTP_200_OK)


class OrderListView(generics.ListAPIView):
    """The signed-in user's orders, newest first."""

    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        return order_queryset().filter(user=self.request.user)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['delivery_settings'] = DeliverySettings.load()
        return context


class AdminOrderListView(OrderListView):
    """Back-office list of every order."""

    permission_classes = [IsBackOfficeRole]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'order_type', 'payment_method', 'paid']
    search_fields = ['name', 'email', 'order_reference', 'invoice_number', 'period_invoice_number']
    ordering_fields = ['created_at', 'total']

    def get_queryset(self):
        return order_queryset()


class OrderDetailView(APIView):
    """Single order: owner or back office may read it."""

    permission_classes = [IsAuthenticated]

    def get_order(self, request, order_id):
        order = get_object_or_404(order_queryset(), pk=order_id)
        if order.user_id != request.user.pk and not request.user.is_back_office:
            raise PermissionDenied("You do not have access to this order.")
        return order

    def serialize(self, order):
        context = {'delivery_settings': DeliverySettings.load()}
        return OrderSerializer(order, context=context).data

    def get(self, request, order_id):
        order = self.get_order(request, order_id)
        self.repair_period_linkage(order)
        return Response(self.serialize(order))

    def repair_period_linkage(self, order):
        """Copy the owning period invoice's number and window onto the order."""

        if order.order_type != Order.OrderType.PERIOD:
            return
        if order.period_invoice_number and order.period_start and order.period_end:
            return

        invoice = Invoice.objects.filter(orders=order, invoice_type=Invoice.InvoiceType.PERIOD).first()
        if invoice is None:
            logger.warning("No period invoice found for period order %s", order.pk)
            return

        updates = {}
        if not order.period_invoice_number:
            updates['period_invoice_number'] = invoice.invoice_number
        if not order.period_start:
            updates['period_start'] = invoice.period_start
        if not order.period_end:
            updates['period_end'] = invoice.period_end

        Order.objects.filter(pk=order.pk).update(**updates)
        for field, value in updates.items():
            setattr(order, field, value)
        logger.info("Repaired period invoice linkage on order %s: %s", order.pk, sorted(updates))

    def put(self, request, order_id):
        order = self.get_order(request, order_id)
        payment_proof = request.data.get('paymentProofUrl')
        new_status = request.data.get('status')

        if new_status:
            if not request.user.is_back_office:
                raise PermissionDenied("Only staff can change an order's status.")
            if new_status not in Order.Status.values:
                return Response(
                    {'error': 'Invalid status', 'details': {'status': new_status, 'allowed': Order.Status.values}},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        previous_status = order.status
        if payment_proof:
            order.payment_proof = payment_proof
            order.status = Order.Status.PENDING_PAYMENT_VERIFICATION
        if new_status:
            order.status = new_status
        order.full_clean()

        with transaction.atomic():
            order.save()
            if new_status:
                order_status_changed.send(
                    sender=Order, order=order, previous_status=previous_status, status=order.status,
                )

        if new_status:
            broadcast_order_update(order)

        order = get_object_or_404(order_queryset(), pk=order.pk)
        return Response({'success': True, 'order': self.serialize(order)})

    def delete(self, request, order_id):
        if not request.user.is_admin:
            raise PermissionDenied("Only administrators can delete orders.")
        order = get_object_or_404(Order, pk=order_id)

        with transaction.atomic():
            touched = remove_order_from_invoices(order)
            order.delete()

        logger.info("Order %s deleted by user %s; invoices touched: %s", order_id, request.user.pk, touched)
        return Response({
            'success': True,
            'message': 'Order and related invoice references deleted successfully',
        })


class OrderPrintView(OrderDetailView):
    """Printable HTML copy of an order (``?language=`` overrides the user's)."""

    http_method_names = ['get', 'head', 'options']

    def get(self, request, order_id):
        order = self.get_order(request, order_id)
        language = resolve_language(request.query_params.get('language') or request.user.language)
        lines = document_lines(order.items.all(), language, LABELS[language]['missing_product'])
        subtotal = order.subtotal if order.subtotal else sum((line['total'] for line in lines), Decimal('0'))

        delivery_settings = DeliverySettings.load()
        method = delivery_settings.method_at(order.delivery_method) if delivery_settings else None
        html = render_document(
            'orders/documents/order.html', language,
            order=order,
            lines=lines,
            address=localized(order.shipping_address, language),
            delivery_method=localized((method or {}).get('name') or order.delivery_method_label, language),
            subtotal=subtotal,
            delivery_cost=order.delivery_cost or Decimal('0'),
            total=order.total or subtotal,
        )
        return HttpResponse(html, content_type='text/html; charset=utf-8')
