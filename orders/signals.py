"""Domain events raised by the orders app.

``order_status_changed`` is sent after an order's status was saved, with
``order``, ``previous_status`` and ``status`` keyword arguments. Invoices
listen to it to recompute their own status.
"""

import logging

from django.dispatch import Signal

logger = logging.getLogger(__name__)

order_status_changed = Signal()


def broadcast_order_update(order):
    """Notify clients polling the order confirmation page.

    Clients poll ``GET /api/orders/<id>/``; this only records the event.
    """
    logger.info("Order %s status is now %s", order.pk, order.status)
