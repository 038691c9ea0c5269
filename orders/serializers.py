"""Serializers for orders.

Stored totals may be missing on older rows; the read serializer fills them
in from the order lines without writing anything back.
"""

from decimal import Decimal

from rest_framework import serializers

from .models import Order, OrderItem


class OrderProductSerializer(serializers.Serializer):
    """The subset of product fields shown next to an order line."""

    id = serializers.IntegerField()
    name = serializers.CharField()
    displayNames = serializers.JSONField(source='display_names')
    images = serializers.JSONField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)


class OrderItemSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(source='product_id', read_only=True)
    product = OrderProductSerializer(read_only=True, allow_null=True)
    price = serializers.DecimalField(source='unit_price', max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'quantity', 'price']


class OrderSerializer(serializers.ModelSerializer):
    """Order as returned to the storefront and the back office.

    Pass ``delivery_settings`` in the context to resolve ``deliveryMethodName``
    from the current settings; the checkout-time label is the fallback.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    shippingAddress = serializers.JSONField(source='shipping_address')
    deliveryMethod = serializers.IntegerField(source='delivery_method')
    deliveryMethodName = serializers.SerializerMethodField()
    deliveryCost = serializers.DecimalField(source='delivery_cost', max_digits=12, decimal_places=2, allow_null=True)
    paymentMethod = serializers.CharField(source='payment_method')
    orderType = serializers.CharField(source='order_type')
    periodInvoiceNumber = serializers.CharField(source='period_invoice_number')
    periodStart = serializers.DateTimeField(source='period_start', allow_null=True)
    periodEnd = serializers.DateTimeField(source='period_end', allow_null=True)
    invoiceNumber = serializers.CharField(source='invoice_number')
    orderReference = serializers.CharField(source='order_reference')
    paymentProof = serializers.CharField(source='payment_proof')
    paymentReference = serializers.CharField(source='payment_reference')
    paymentDate = serializers.CharField(source='payment_date')
    createdAt = serializers.DateTimeField(source='created_at')
    updatedAt = serializers.DateTimeField(source='updated_at')

    class Meta:
        model = Order
        fields = [
            'id', 'user', 'name', 'email', 'phone', 'shippingAddress', 'items',
            'deliveryMethod', 'deliveryMethodName', 'deliveryCost', 'subtotal', 'total',
            'paymentMethod', 'orderType', 'status', 'paid',
            'periodInvoiceNumber', 'periodStart', 'periodEnd', 'invoiceNumber',
            'orderReference', 'paymentProof', 'paymentReference', 'paymentDate',
            'createdAt', 'updatedAt',
        ]
        read_only_fields = fields

    def get_deliveryMethodName(self, obj):
        settings = self.context.get('delivery_settings')
        method = settings.method_at(obj.delivery_method) if settings else None
        if method:
            return method.get('name')
        return obj.delivery_method_label

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not instance.subtotal or not instance.total:
            subtotal = instance.calculated_subtotal()
            delivery_cost = instance.delivery_cost or Decimal('0')
            data['subtotal'] = subtotal
            data['deliveryCost'] = delivery_cost
            data['total'] = subtotal + delivery_cost
        return data
