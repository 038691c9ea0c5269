"""Delivery fleet: vehicles, their maintenance history and order assignments."""

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Vehicle(models.Model):
    """A delivery vehicle together with its assigned driver.

    A vehicle takes a new order only while it is ``Available``; assigning an
    order puts it ``On Delivery`` until the delivery is closed.
    """

    class BodyType(models.TextChoices):
        VAN = 'Van', 'Van'
        TRUCK = 'Truck', 'Truck'
        LORRY = 'Lorry', 'Lorry'
        MOTORCYCLE = 'Motorcycle', 'Motorcycle'

    class Location(models.TextChoices):
        HONG_KONG = 'Hong Kong', 'Hong Kong'
        KOWLOON = 'Kowloon', 'Kowloon'
        NEW_TERRITORIES = 'New Territories', 'New Territories'

    class Status(models.TextChoices):
        AVAILABLE = 'Available', 'Available'
        ON_DELIVERY = 'On Delivery', 'On Delivery'
        MAINTENANCE = 'Maintenance', 'Maintenance'
        OUT_OF_SERVICE = 'Out of Service', 'Out of Service'

    registration_no = models.CharField(max_length=50, unique=True)
    owner = models.CharField(max_length=255)
    make_year = models.PositiveIntegerField()
    make = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    chassis_no = models.CharField(max_length=100, unique=True)
    weight = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    cylinder_capacity = models.PositiveIntegerField()
    body_type = models.CharField(max_length=20, choices=BodyType.choices)

    driver_name = models.CharField(max_length=255)
    driver_license_no = models.CharField(max_length=100)
    driver_contact_no = models.CharField(max_length=50)
    driver_email = models.EmailField()

    assigned_location = models.CharField(max_length=30, choices=Location.choices)
    assigned_date = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['assigned_location'], name='vehicle_location_idx'),
            models.Index(fields=['status'], name='vehicle_status_idx'),
        ]

    def __str__(self):
        return f"{self.registration_no} ({self.make} {self.model})"

    def save(self, *args, **kwargs):
        self.registration_no = (self.registration_no or '').strip()
        self.chassis_no = (self.chassis_no or '').strip()
        self.driver_email = (self.driver_email or '').strip().lower()
        super().save(*args, **kwargs)

    @property
    def vehicle_age(self):
        return timezone.now().year - self.make_year

    @property
    def is_available_for_assignment(self):
        return self.status == self.Status.AVAILABLE


class MaintenanceRecord(models.Model):
    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name='maintenance_records')
    date = models.DateTimeField()
    description = models.TextField()
    cost = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    next_maintenance_date = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-date', '-id']

    def __str__(self):
        return f"{self.vehicle.registration_no} on {self.date:%Y-%m-%d}"


class DeliveryAssignment(models.Model):
    """An order scheduled for delivery on a vehicle. An order rides on at most one vehicle."""

    class Status(models.TextChoices):
        PENDING = 'Pending', 'Pending'
        IN_TRANSIT = 'In Transit', 'In Transit'
        DELIVERED = 'Delivered', 'Delivered'
        FAILED = 'Failed', 'Failed'

    CLOSED_STATUSES = {Status.DELIVERED, Status.FAILED}

    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name='assignments')
    order = models.OneToOneField('orders.Order', on_delete=models.CASCADE, related_name='delivery_assignment')
    assigned_at = models.DateTimeField(default=timezone.now)
    scheduled_delivery_date = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    delivery_notes = models.TextField(blank=True)

    class Meta:
        ordering = ['-assigned_at', '-id']

    def __str__(self):
        return f"Order {self.order_id} on {self.vehicle.registration_no}"
