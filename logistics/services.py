"""Assigning orders to vehicles and closing deliveries.

Both operations keep the order's status in step with the delivery and raise
``order_status_changed`` so the order's invoices follow.
"""

import logging

from django.db import transaction

from orders.models import Order
from orders.signals import broadcast_order_update, order_status_changed
from .models import DeliveryAssignment, Vehicle

logger = logging.getLogger(__name__)

ORDER_STATUS_FOR_DELIVERY = {
    DeliveryAssignment.Status.PENDING: Order.Status.PROCESSING,
    DeliveryAssignment.Status.IN_TRANSIT: Order.Status.PROCESSING,
    DeliveryAssignment.Status.DELIVERED: Order.Status.DELIVERED,
    DeliveryAssignment.Status.FAILED: Order.Status.CANCELLED,
}


class AssignmentError(Exception):
    def __init__(self, error, status_code=400):
        super().__init__(error)
        self.error = error
        self.status_code = status_code


def _set_order_status(order, new_status):
    previous = order.status
    if previous == new_status:
        return
    order.status = new_status
    order.save(update_fields=['status', 'updated_at'])
    order_status_changed.send(sender=Order, order=order, previous_status=previous, status=new_status)
    transaction.on_commit(lambda: broadcast_order_update(order))


def assign_order(vehicle_id, order_id, scheduled_delivery_date):
    """Put ``order_id`` on an available vehicle and mark the order processing."""

    with transaction.atomic():
        vehicle = Vehicle.objects.select_for_update().filter(pk=vehicle_id).first()
        if vehicle is None:
            raise AssignmentError('Vehicle not found', 404)
        if not vehicle.is_available_for_assignment:
            raise AssignmentError('Vehicle is not available for assignment')

        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise AssignmentError('Order not found', 404)
        if DeliveryAssignment.objects.filter(order=order).exists():
            raise AssignmentError('Order is already assigned to a vehicle')

        assignment = DeliveryAssignment.objects.create(
            vehicle=vehicle, order=order, scheduled_delivery_date=scheduled_delivery_date,
        )
        vehicle.status = Vehicle.Status.ON_DELIVERY
        vehicle.save(update_fields=['status', 'updated_at'])
        _set_order_status(order, Order.Status.PROCESSING)

    logger.info("Order %s assigned to vehicle %s", order.pk, vehicle.registration_no)
    return assignment


def update_assignment(vehicle_id, order_id, status, delivery_notes=''):
    """Record delivery progress; a delivered or failed run frees the vehicle."""

    if status not in DeliveryAssignment.Status.values:
        raise AssignmentError('Invalid delivery status')

    with transaction.atomic():
        assignment = (
            DeliveryAssignment.objects.select_for_update()
            .select_related('vehicle', 'order')
            .filter(vehicle_id=vehicle_id, order_id=order_id)
            .first()
        )
        if assignment is None:
            raise AssignmentError('Vehicle or order assignment not found', 404)

        assignment.status = status
        assignment.delivery_notes = delivery_notes or ''
        assignment.save(update_fields=['status', 'delivery_notes'])

        vehicle = assignment.vehicle
        if status in DeliveryAssignment.CLOSED_STATUSES:
            vehicle.status = Vehicle.Status.AVAILABLE
            vehicle.save(update_fields=['status', 'updated_at'])

        _set_order_status(assignment.order, ORDER_STATUS_FOR_DELIVERY[status])

    logger.info("Delivery of order %s on vehicle %s is now %s", order_id, vehicle.registration_no, status)
    return assignment
