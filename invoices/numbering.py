"""Sequential order references and invoice numbers.

Formats, with ``YYYYMM`` taken from the current local date:

- order reference: ``ORD-YYYYMM-0001``
- one-time invoice: ``INV-YYYYMM-0001``
- period invoice: ``PER-YYYYMM-W-01-001`` (``W`` weekly, ``M`` monthly,
  then the period number within the month and the sequence)

Each counter row is locked while it is incremented, so concurrent checkouts
never hand out the same number.
"""

from django.db import transaction
from django.utils import timezone

from .models import InvoiceCounter

PERIOD_TYPE_CODES = {
    InvoiceCounter.PeriodType.WEEKLY: 'W',
    InvoiceCounter.PeriodType.MONTHLY: 'M',
}


def next_sequence(period_type, period_number=1, now=None):
    """Increment and return the counter for the current month."""
    now = timezone.localtime(now)
    with transaction.atomic():
        counter, _ = InvoiceCounter.objects.select_for_update().get_or_create(
            year=now.year,
            month=now.month,
            period_type=period_type,
            period_number=period_number,
            defaults={'sequence': 0},
        )
        counter.sequence += 1
        counter.save(update_fields=['sequence', 'updated_at'])
    return now, counter.sequence


def generate_order_reference(now=None) -> str:
    now, sequence = next_sequence(InvoiceCounter.PeriodType.ORDER, now=now)
    return f"ORD-{now:%Y%m}-{sequence:04d}"


def generate_one_time_invoice_number(now=None) -> str:
    now, sequence = next_sequence(InvoiceCounter.PeriodType.ONE_TIME, now=now)
    return f"INV-{now:%Y%m}-{sequence:04d}"


def generate_period_invoice_number(period_type, period_number, now=None) -> str:
    if period_type not in PERIOD_TYPE_CODES:
        raise ValueError(f"Unknown billing period: {period_type!r}")
    now, sequence = next_sequence(period_type, period_number, now=now)
    return f"PER-{now:%Y%m}-{PERIOD_TYPE_CODES[period_type]}-{period_number:02d}-{sequence:03d}"


def current_period_number(period_type, start) -> int:
    """Week index within the month for weekly billing; always 1 for monthly."""
    if period_type == InvoiceCounter.PeriodType.WEEKLY:
        return (start.day - 1) // 7 + 1
    return 1
