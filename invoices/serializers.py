"""Serializers for invoices.

Orders inside an invoice are rendered with totals recomputed from their
lines whenever the stored values are missing. An order that cannot be
rendered (for instance because one of its products was deleted) is replaced
by a zeroed placeholder so the rest of the invoice still loads.
"""

import logging
from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from .models import Invoice, InvoiceItem

logger = logging.getLogger(__name__)


def _iso(value):
    return (value or timezone.now()).isoformat()


def order_placeholder(order):
    return {
        'id': getattr(order, 'pk', None),
        'createdAt': timezone.now().isoformat(),
        'subtotal': Decimal('0'),
        'deliveryCost': Decimal('0'),
        'total': Decimal('0'),
        'cartProducts': [],
    }


def serialize_invoice_order(order):
    """Render one order of an invoice with recomputed totals."""

    items = list(order.items.all())
    calculated_subtotal = sum((item.line_total for item in items), Decimal('0'))
    calculated_delivery = (order.total or Decimal('0')) - calculated_subtotal

    return {
        'id': order.pk,
        'name': order.name,
        'email': order.email,
        'status': order.status,
        'deliveryMethod': order.delivery_method,
        'orderReference': order.order_reference,
        'createdAt': _iso(order.created_at),
        'subtotal': order.subtotal or calculated_subtotal,
        'deliveryCost': order.delivery_cost or calculated_delivery,
        'total': order.total or calculated_subtotal + calculated_delivery,
        'cartProducts': [
            {
                'product': {
                    'id': item.product.pk,
                    'name': item.product.name,
                    'displayNames': item.product.display_names,
                    'images': item.product.images,
                    'price': item.product.price,
                    'description': item.product.description,
                },
                'quantity': item.quantity,
            }
            for item in items
        ],
    }


class InvoiceItemSerializer(serializers.ModelSerializer):
    product = serializers.SerializerMethodField()

    class Meta:
        model = InvoiceItem
        fields = ['id', 'product', 'quantity', 'price']

    def get_product(self, obj):
        product = obj.product
        if product is None:
            return None
        return {
            'id': product.pk,
            'name': product.name,
            'images': product.images,
            'price': product.price,
            'description': product.description,
        }


class InvoiceListSerializer(serializers.ModelSerializer):
    """Compact invoice row for lists."""

    invoiceNumber = serializers.CharField(source='invoice_number')
    invoiceType = serializers.CharField(source='invoice_type')
    periodStart = serializers.DateTimeField(source='period_start')
    periodEnd = serializers.DateTimeField(source='period_end')
    paymentDate = serializers.DateTimeField(source='payment_date', allow_null=True)
    orderCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoiceNumber', 'invoiceType', 'name', 'email', 'amount', 'status',
            'periodStart', 'periodEnd', 'paymentDate', 'orderCount', 'createdAt',
        ]
        read_only_fields = fields

    def get_orderCount(self, obj):
        return len(obj.orders.all())


class InvoiceSerializer(InvoiceListSerializer):
    """Full invoice with its user, orders and lines."""

    user = serializers.SerializerMethodField()
    orders = serializers.SerializerMethodField()
    items = InvoiceItemSerializer(many=True, read_only=True)
    billingAddress = serializers.JSONField(source='billing_address')
    shippingAddress = serializers.JSONField(source='shipping_address')
    paymentMethod = serializers.CharField(source='payment_method')
    paymentProofUrl = serializers.CharField(source='payment_proof_url')
    deliveryMethod = serializers.IntegerField(source='delivery_method', allow_null=True)
    deliveryCost = serializers.DecimalField(source='delivery_cost', max_digits=12, decimal_places=2, allow_null=True)
    updatedAt = serializers.DateTimeField(source='updated_at')

    class Meta(InvoiceListSerializer.Meta):
        fields = InvoiceListSerializer.Meta.fields + [
            'user', 'phone', 'orders', 'items', 'billingAddress', 'shippingAddress',
            'paymentMethod', 'paymentProofUrl', 'deliveryMethod', 'deliveryCost',
            'subtotal', 'total', 'updatedAt',
        ]
        read_only_fields = fields

    def get_user(self, obj):
        user = obj.user
        return {'id': user.pk, 'name': user.name, 'email': user.email, 'address': user.address}

    def get_orders(self, obj):
        rendered = []
        for order in obj.orders.all():
            try:
                rendered.append(serialize_invoice_order(order))
            except Exception:
                logger.exception("Error serializing order %s of invoice %s", order.pk, obj.invoice_number)
                rendered.append(order_placeholder(order))
        return rendered
