"""Signal receivers keeping invoices in step with their orders."""

import logging

from django.dispatch import receiver

from orders.signals import order_status_changed
from .models import Invoice
from .services import recalculate_invoice_status

logger = logging.getLogger(__name__)


@receiver(order_status_changed)
def recalculate_invoices_for_order(sender, order, **kwargs):
    """Recompute the status of every invoice holding ``order``."""

    for invoice in Invoice.objects.filter(orders=order):
        previous = invoice.status
        status = recalculate_invoice_status(invoice)
        if status != previous:
            logger.info("Invoice %s status %s -> %s", invoice.invoice_number, previous, status)
