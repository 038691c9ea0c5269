from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from .models import DeliveryAssignment, MaintenanceRecord, Vehicle


class DriverSerializer(serializers.Serializer):
    name = serializers.CharField(source='driver_name', max_length=255)
    licenseNo = serializers.CharField(source='driver_license_no', max_length=100)
    contactNo = serializers.CharField(source='driver_contact_no', max_length=50)
    email = serializers.EmailField(source='driver_email')


class MaintenanceRecordSerializer(serializers.ModelSerializer):
    nextMaintenanceDate = serializers.DateTimeField(source='next_maintenance_date')
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = MaintenanceRecord
        fields = ['id', 'date', 'description', 'cost', 'nextMaintenanceDate', 'createdAt']


class AssignmentSerializer(serializers.ModelSerializer):
    """Assignment row with a short summary of the order it carries."""

    order = serializers.SerializerMethodField()
    assignedAt = serializers.DateTimeField(source='assigned_at', read_only=True)
    scheduledDeliveryDate = serializers.DateTimeField(source='scheduled_delivery_date', read_only=True)
    deliveryNotes = serializers.CharField(source='delivery_notes', read_only=True)

    class Meta:
        model = DeliveryAssignment
        fields = ['id', 'order', 'assignedAt', 'scheduledDeliveryDate', 'status', 'deliveryNotes']
        read_only_fields = fields

    def get_order(self, obj):
        order = obj.order
        return {'id': order.pk, 'status': order.status, 'total': order.total, 'createdAt': order.created_at}


class VehicleSerializer(serializers.ModelSerializer):
    registrationNo = serializers.CharField(
        source='registration_no', max_length=50,
        validators=[UniqueValidator(queryset=Vehicle.objects.all(), message='Registration number already exists')],
    )
    makeYear = serializers.IntegerField(source='make_year', min_value=1900)
    chassisNo = serializers.CharField(
        source='chassis_no', max_length=100,
        validators=[UniqueValidator(queryset=Vehicle.objects.all(), message='Chassis number already exists')],
    )
    cylinderCapacity = serializers.IntegerField(source='cylinder_capacity', min_value=0)
    bodyType = serializers.ChoiceField(source='body_type', choices=Vehicle.BodyType.choices)
    driver = DriverSerializer(source='*')
    assignedLocation = serializers.ChoiceField(source='assigned_location', choices=Vehicle.Location.choices)
    assignedDate = serializers.DateTimeField(source='assigned_date')
    vehicleAge = serializers.IntegerField(source='vehicle_age', read_only=True)
    assignedOrders = AssignmentSerializer(source='assignments', many=True, read_only=True)
    maintenanceRecords = MaintenanceRecordSerializer(source='maintenance_records', many=True, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Vehicle
        fields = [
            'id', 'registrationNo', 'owner', 'makeYear', 'make', 'model', 'chassisNo', 'weight',
            'cylinderCapacity', 'bodyType', 'driver', 'assignedLocation', 'assignedDate', 'status',
            'vehicleAge', 'assignedOrders', 'maintenanceRecords', 'createdAt', 'updatedAt',
        ]
