"""Django admin configuration for invoices."""

from django.contrib import admin
from django.utils.html import format_html, format_html_join

from .models import Invoice, InvoiceCounter, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    raw_id_fields = ('order', 'product')


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    """Admin configuration for invoices."""

    list_display = ('invoice_number', 'invoice_type', 'get_customer', 'amount', 'status', 'period_end', 'created_at')
    list_filter = ('invoice_type', 'status', 'payment_method', 'created_at')
    search_fields = ('invoice_number', 'name', 'email', 'user__username')
    raw_id_fields = ('user',)
    filter_horizontal = ('orders',)
    readonly_fields = ('invoice_number', 'created_at', 'updated_at', 'get_order_summary')
    inlines = [InvoiceItemInline]

    def get_customer(self, obj):
        return obj.user.display_name
    get_customer.short_description = 'Customer'

    # Escape every dynamic value.
    def get_order_summary(self, obj):
        rows = format_html_join(
            '',
            '<tr><td style="padding: 4px 8px;">#{}</td>'
            '<td style="padding: 4px 8px;">{}</td>'
            '<td style="padding: 4px 8px; text-align: right;">{}</td></tr>',
            ((order.pk, order.status, order.total) for order in obj.orders.all()),
        )
        return format_html(
            '<table style="border-collapse: collapse;">'
            '<thead><tr><th>Order</th><th>Status</th><th>Total</th></tr></thead>'
            '<tbody>{}</tbody></table>',
            rows,
        )
    get_order_summary.short_description = 'Orders'


@admin.register(InvoiceCounter)
class InvoiceCounterAdmin(admin.ModelAdmin):
    list_display = ('period_type', 'year', 'month', 'period_number', 'sequence', 'updated_at')
    list_filter = ('period_type', 'year')
