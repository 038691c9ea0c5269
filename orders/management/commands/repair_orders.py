"""Backfill order fields that older rows may lack.

- ``subtotal`` / ``delivery_cost`` recomputed from the order lines and total
- ``order_type`` derived from the payment method
- period linkage (invoice number and window) copied from the period invoice
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Q

from invoices.models import Invoice
from orders.models import Order


class Command(BaseCommand):
    help = "Recompute missing order amounts and restore order types and period invoice links."

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help='Report the changes without saving them.')

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        amounts = types = links = 0

        with transaction.atomic():
            missing_amounts = Order.objects.filter(
                Q(subtotal__isnull=True) | Q(delivery_cost__isnull=True)
            ).prefetch_related('items__product')
            for order in missing_amounts:
                subtotal = order.calculated_subtotal()
                delivery_cost = (order.total or Decimal('0')) - subtotal
                self.stdout.write(f"Order {order.pk}: subtotal {subtotal}, delivery cost {delivery_cost}")
                if not dry_run:
                    Order.objects.filter(pk=order.pk).update(
                        subtotal=subtotal,
                        delivery_cost=delivery_cost,
                        total=order.total if order.total is not None else subtotal,
                    )
                amounts += 1

            mistyped = Order.objects.filter(payment_method=Order.PaymentMethod.PERIOD_INVOICE).exclude(
                order_type=Order.OrderType.PERIOD
            )
            types = mistyped.count()
            if types and not dry_run:
                mistyped.update(order_type=Order.OrderType.PERIOD)

            unlinked = Order.objects.filter(
                payment_method=Order.PaymentMethod.PERIOD_INVOICE, period_invoice_number='',
            )
            for order in unlinked:
                invoice = Invoice.objects.filter(orders=order, invoice_type=Invoice.InvoiceType.PERIOD).first()
                if invoice is None:
                    continue
                self.stdout.write(f"Order {order.pk}: linked to {invoice.invoice_number}")
                if not dry_run:
                    Order.objects.filter(pk=order.pk).update(
                        period_invoice_number=invoice.invoice_number,
                        period_start=order.period_start or invoice.period_start,
                        period_end=order.period_end or invoice.period_end,
                    )
                links += 1

            if dry_run:
                transaction.set_rollback(True)

        prefix = 'Would fix' if dry_run else 'Fixed'
        self.stdout.write(self.style.SUCCESS(
            f"{prefix}: {amounts} order amounts, {types} order types, {links} period invoice links."
        ))
