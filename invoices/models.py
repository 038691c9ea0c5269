"""Database models for invoices and invoice numbering."""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Invoice(models.Model):
    """Invoice for one order (one-time) or a billing window of orders (period)."""

    class InvoiceType(models.TextChoices):
        ONE_TIME = 'one-time', 'One-time'
        PERIOD = 'period', 'Period'

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PAID = 'paid', 'Paid'
        OVERDUE = 'overdue', 'Overdue'
        CANCELLED = 'cancelled', 'Cancelled'

    class PaymentMethod(models.TextChoices):
        CREDIT_CARD = 'credit_card', 'Credit card'
        BANK_TRANSFER = 'bank_transfer', 'Bank transfer'
        CASH = 'cash', 'Cash'
        OFFLINE_PAYMENT = 'offline_payment', 'Offline payment'

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='invoices')
    invoice_number = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=20)
    invoice_type = models.CharField(max_length=20, choices=InvoiceType.choices)
    orders = models.ManyToManyField('orders.Order', blank=True, related_name='invoices')
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    period_start = models.DateTimeField()
    period_end = models.DateTimeField()

    billing_address = models.JSONField(null=True, blank=True)
    shipping_address = models.JSONField(null=True, blank=True)

    payment_date = models.DateTimeField(null=True, blank=True)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, blank=True)
    payment_proof_url = models.URLField(max_length=500, blank=True)

    # Snapshot of the order totals, one-time invoices only.
    delivery_method = models.PositiveIntegerField(null=True, blank=True)
    delivery_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'status'], name='invoice_user_status_idx'),
            models.Index(fields=['invoice_type', 'status'], name='invoice_type_status_idx'),
            models.Index(fields=['period_end'], name='invoice_period_end_idx'),
        ]

    def __str__(self):
        return self.invoice_number

    def clean(self):
        super().clean()
        if self.period_start and self.period_end and self.period_end < self.period_start:
            raise ValidationError({'period_end': 'Period end date must be after period start date.'})


class InvoiceItem(models.Model):
    """Product line copied onto an invoice at checkout."""

    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    order = models.ForeignKey('orders.Order', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    product = models.ForeignKey('products.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])

    def __str__(self):
        return f"{self.invoice_id}: {self.product_id} x {self.quantity}"


class InvoiceCounter(models.Model):
    """Monotonic counter behind order references and invoice numbers."""

    class PeriodType(models.TextChoices):
        ORDER = 'order', 'Order'
        ONE_TIME = 'one-time', 'One-time'
        WEEKLY = 'weekly', 'Weekly'
        MONTHLY = 'monthly', 'Monthly'

    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField()
    period_type = models.CharField(max_length=10, choices=PeriodType.choices)
    period_number = models.PositiveSmallIntegerField(default=1)
    sequence = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['year', 'month', 'period_type', 'period_number'],
                name='unique_invoice_counter',
            ),
        ]

    def __str__(self):
        return f"{self.period_type} {self.year}-{self.month:02d}#{self.period_number}: {self.sequence}"
