"""Invoice bookkeeping shared by checkout, the order API and admin tools."""

import calendar
import logging
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .models import Invoice
from .numbering import current_period_number, generate_period_invoice_number

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59, 999999)


def _day_start(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def _day_end(day):
    return timezone.make_aware(datetime.combine(day, END_OF_DAY))


def billing_window(user, now=None):
    """Return ``(period_start, period_end)`` for a period-paid user's order.

    Weekly windows start today and cover seven days; monthly windows cover
    the current calendar month. Reusing an open invoice is the job of
    :func:`find_open_period_invoice`.
    """

    now = now or timezone.now()
    today = timezone.localtime(now).date()

    if user.payment_period == user.PaymentPeriod.WEEKLY:
        return _day_start(today), _day_end(today + timedelta(days=6))

    last_day = calendar.monthrange(today.year, today.month)[1]
    return _day_start(today.replace(day=1)), _day_end(today.replace(day=last_day))


def find_open_period_invoice(user, now=None):
    """Pending period invoice whose window contains ``now``, locked for update."""
    now = now or timezone.now()
    return (
        Invoice.objects.select_for_update()
        .filter(
            user=user,
            invoice_type=Invoice.InvoiceType.PERIOD,
            status=Invoice.Status.PENDING,
            period_start__lte=now,
            period_end__gte=now,
        )
        .order_by('-period_end')
        .first()
    )


def get_or_create_period_invoice(user, contact, now=None):
    """Find the open period invoice for ``now`` or start a new one.

    ``contact`` carries ``name``, ``email``, ``phone`` and ``shipping_address``
    from the checkout form.
    """

    now = now or timezone.now()
    invoice = find_open_period_invoice(user, now)
    if invoice is not None:
        return invoice, False

    period_start, period_end = billing_window(user, now)
    period_number = current_period_number(user.payment_period, timezone.localtime(period_start))
    invoice = Invoice(
        user=user,
        invoice_number=generate_period_invoice_number(user.payment_period, period_number),
        name=contact.get('name') or user.display_name,
        email=contact.get('email') or user.email,
        phone=contact.get('phone') or user.phone,
        invoice_type=Invoice.InvoiceType.PERIOD,
        period_start=period_start,
        period_end=period_end,
        amount=Decimal('0'),
        status=Invoice.Status.PENDING,
        shipping_address=contact.get('shipping_address'),
        billing_address=contact.get('shipping_address'),
    )
    invoice.full_clean()
    invoice.save()
    logger.info("Opened period invoice %s for user %s", invoice.invoice_number, user.pk)
    return invoice, True


def recalculate_invoice_status(invoice):
    """Derive an invoice's status from its orders.

    All delivered: paid (payment date defaults to now, orders flagged paid).
    All cancelled: cancelled. Anything else leaves the status alone.
    """

    orders = list(invoice.orders.all())
    if not orders:
        return invoice.status

    statuses = {order.status for order in orders}
    if statuses == {'delivered'}:
        invoice.status = Invoice.Status.PAID
        if invoice.payment_date is None:
            invoice.payment_date = timezone.now()
        invoice.save(update_fields=['status', 'payment_date', 'updated_at'])
        invoice.orders.filter(paid=False).update(paid=True)
    elif statuses == {'cancelled'}:
        invoice.status = Invoice.Status.CANCELLED
        invoice.save(update_fields=['status', 'updated_at'])
    return invoice.status


def remove_order_from_invoices(order):
    """Detach ``order`` from every invoice that references it.

    The order's total is taken off each invoice together with its invoice
    lines; period invoices that end up without orders are deleted.
    Returns the invoice numbers that were touched.
    """

    touched = []
    total = order.total or Decimal('0')
    with transaction.atomic():
        for invoice in Invoice.objects.select_for_update().filter(orders=order):
            invoice.orders.remove(order)
            invoice.items.filter(order=order).delete()
            touched.append(invoice.invoice_number)

            if invoice.invoice_type == Invoice.InvoiceType.PERIOD and not invoice.orders.exists():
                logger.info("Deleting empty period invoice %s", invoice.invoice_number)
                invoice.delete()
                continue

            invoice.amount = max(invoice.amount - total, Decimal('0'))
            invoice.save(update_fields=['amount', 'updated_at'])
    return touched


def cleanup_invoices():
    """Delete period invoices without orders and recompute the others' amounts.

    Many-to-many rows vanish with their order, so what is left to repair is
    invoices whose amount still counts orders that no longer exist.
    Returns ``{"deleted": [...], "updated": [...]}`` invoice numbers.
    """

    deleted, updated = [], []
    with transaction.atomic():
        for invoice in Invoice.objects.select_for_update().prefetch_related('orders'):
            orders = list(invoice.orders.all())
            if invoice.invoice_type == Invoice.InvoiceType.PERIOD and not orders:
                deleted.append(invoice.invoice_number)
                invoice.delete()
                continue

            if not orders:
                continue
            amount = sum((order.total or Decimal('0') for order in orders), Decimal('0'))
            if amount != invoice.amount:
                invoice.amount = amount
                invoice.save(update_fields=['amount', 'updated_at'])
                updated.append(invoice.invoice_number)

            stale_items = invoice.items.filter(order__isnull=True)
            if invoice.invoice_type == Invoice.InvoiceType.PERIOD and stale_items.exists():
                stale_items.delete()

    logger.info("Invoice cleanup: %d deleted, %d updated", len(deleted), len(updated))
    return {'deleted': deleted, 'updated': updated}


def parse_payment_date(raw, default=None):
    """Parse an ISO date or datetime from a client; ``default`` when blank or invalid."""

    if isinstance(raw, datetime):
        value = raw
    elif raw:
        text = str(raw).strip()
        try:
            value = parse_datetime(text)
            if value is None:
                day = parse_date(text[:10])
                value = datetime.combine(day, time.min) if day else None
        except ValueError:
            value = None
    else:
        value = None

    if value is None:
        return default
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value
