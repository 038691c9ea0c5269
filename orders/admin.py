"""Django admin configuration for orders."""

from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    """Inline display of order line items."""

    model = OrderItem
    extra = 0
    # Prices are a checkout snapshot.
    readonly_fields = ('product', 'price', 'quantity')
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin configuration for customer orders."""

    list_display = ('id', 'order_reference', 'user', 'total', 'status', 'order_type', 'paid', 'created_at')
    list_filter = ('status', 'order_type', 'payment_method', 'paid', 'created_at')
    search_fields = ('id', 'order_reference', 'invoice_number', 'period_invoice_number', 'email', 'user__username')
    readonly_fields = ('order_reference', 'invoice_number', 'period_invoice_number', 'created_at', 'updated_at')
    inlines = [OrderItemInline]
