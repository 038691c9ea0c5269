"""Database models for orders and order lines."""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models

from core.i18n import missing_languages

phone_validator = RegexValidator(
    regex=r'^\d{8,}$',
    message='%(value)s is not a valid phone number!',
)


def validate_shipping_address(value):
    missing = [code for code, absent in missing_languages(value).items() if absent]
    if missing:
        raise ValidationError(f"Shipping address is missing: {', '.join(missing)}")


class Order(models.Model):
    """A storefront purchase.

    ``delivery_method`` is the index into the delivery settings list at
    checkout time; ``delivery_method_label`` keeps the method's name as it
    was, so later edits to the settings cannot rewrite history.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PENDING_PAYMENT_VERIFICATION = 'pending_payment_verification', 'Pending payment verification'
        PROCESSING = 'processing', 'Processing'
        SHIPPED = 'shipped', 'Shipped'
        DELIVERED = 'delivered', 'Delivered'
        CANCELLED = 'cancelled', 'Cancelled'

    class PaymentMethod(models.TextChoices):
        ONLINE = 'online', 'Online'
        OFFLINE = 'offline', 'Offline'
        PERIOD_INVOICE = 'periodInvoice', 'Period invoice'

    class OrderType(models.TextChoices):
        ONE_TIME = 'onetime-order', 'One-time order'
        PERIOD = 'period-order', 'Period order'

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='orders')
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=20, validators=[phone_validator])
    shipping_address = models.JSONField(validators=[validate_shipping_address])

    delivery_method = models.PositiveIntegerField()
    delivery_method_label = models.JSONField(null=True, blank=True)
    delivery_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, default=0)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, default=0)

    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    order_type = models.CharField(max_length=20, choices=OrderType.choices, default=OrderType.ONE_TIME)
    status = models.CharField(max_length=40, choices=Status.choices, default=Status.PENDING)
    paid = models.BooleanField(default=False)

    period_invoice_number = models.CharField(max_length=50, blank=True)
    period_start = models.DateTimeField(null=True, blank=True)
    period_end = models.DateTimeField(null=True, blank=True)
    invoice_number = models.CharField(max_length=50, blank=True)
    order_reference = models.CharField(max_length=50, blank=True, db_index=True)

    payment_proof = models.URLField(max_length=500, blank=True)
    payment_reference = models.CharField(max_length=255, blank=True)
    payment_date = models.CharField(max_length=50, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='order_user_created_idx'),
            models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
        ]

    def __str__(self):
        return f"Order #{self.id} ({self.order_reference or 'no reference'})"

    def clean(self):
        super().clean()
        if self.order_type == self.OrderType.PERIOD and not self.period_invoice_number:
            raise ValidationError({'period_invoice_number': 'Period orders need a period invoice number.'})

    def calculated_subtotal(self) -> Decimal:
        """Sum of line prices; uses prefetched ``items`` when available."""
        return sum((item.line_total for item in self.items.all()), Decimal('0'))


class OrderItem(models.Model):
    """Line item inside an order.

    ``price`` is the cart price at checkout. ``product`` is cleared when the
    product is deleted, the line itself stays for the order history.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('products.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])

    class Meta:
        verbose_name = "Order Item"
        verbose_name_plural = "Order Items"
        indexes = [
            models.Index(fields=['order', 'product'], name='orderitem_order_product_idx'),
        ]

    def __str__(self):
        return f"Line for Order #{self.order_id} - {self.product_id} x {self.quantity}"

    @property
    def unit_price(self) -> Decimal:
        if self.price is not None:
            return self.price
        if self.product is not None:
            return self.product.price
        return Decimal('0')

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity
