"""Fleet management API (mounted under /api/logistics/), back office only."""

import logging

import django_filters
from django.db.models import Prefetch
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics, serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsBackOfficeRole
from .models import DeliveryAssignment, Vehicle
from .serializers import MaintenanceRecordSerializer, VehicleSerializer
from .services import AssignmentError, assign_order, update_assignment

logger = logging.getLogger(__name__)


def vehicle_queryset():
    return Vehicle.objects.prefetch_related(
        Prefetch('assignments', queryset=DeliveryAssignment.objects.select_related('order')),
        'maintenance_records',
    )


def _blank(value):
    return value is None or value == ''


class VehicleFilter(django_filters.FilterSet):
    location = django_filters.ChoiceFilter(field_name='assigned_location', choices=Vehicle.Location.choices)
    status = django_filters.ChoiceFilter(choices=Vehicle.Status.choices)
    bodyType = django_filters.ChoiceFilter(field_name='body_type', choices=Vehicle.BodyType.choices)

    class Meta:
        model = Vehicle
        fields = ['location', 'status', 'bodyType']


class VehicleUpdateMixin:
    def update_vehicle(self, request, vehicle):
        # A body holding only ``status`` is a status change; anything else is a full edit.
        partial = request.method == 'PATCH' or set(request.data) <= {'id', 'status'}
        serializer = VehicleSerializer(vehicle, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        vehicle = serializer.save()
        logger.info("Vehicle %s updated by user %s", vehicle.registration_no, request.user.pk)
        return Response(VehicleSerializer(vehicle_queryset().get(pk=vehicle.pk)).data)

    def not_found(self):
        return Response({'error': 'Vehicle not found'}, status=status.HTTP_404_NOT_FOUND)


class VehicleListView(VehicleUpdateMixin, generics.ListCreateAPIView):
    """Fleet list filtered by ``location``, ``status`` and ``bodyType``; create; edit by ``id`` in the body."""

    serializer_class = VehicleSerializer
    permission_classes = [IsBackOfficeRole]
    pagination_class = None
    filter_backends = [DjangoFilterBackend]
    filterset_class = VehicleFilter

    def get_queryset(self):
        return vehicle_queryset()

    def perform_create(self, serializer):
        vehicle = serializer.save()
        logger.info("Vehicle %s registered by user %s", vehicle.registration_no, self.request.user.pk)

    def put(self, request):
        vehicle_id = str(request.data.get('id', ''))
        vehicle = Vehicle.objects.filter(pk=vehicle_id).first() if vehicle_id.isdigit() else None
        if vehicle is None:
            return self.not_found()
        return self.update_vehicle(request, vehicle)


class VehicleDetailView(VehicleUpdateMixin, APIView):
    permission_classes = [IsBackOfficeRole]

    def get_vehicle(self, vehicle_id):
        return vehicle_queryset().filter(pk=vehicle_id).first()

    def get(self, request, vehicle_id):
        vehicle = self.get_vehicle(vehicle_id)
        if vehicle is None:
            return self.not_found()
        return Response(VehicleSerializer(vehicle).data)

    def put(self, request, vehicle_id):
        vehicle = self.get_vehicle(vehicle_id)
        if vehicle is None:
            return self.not_found()
        return self.update_vehicle(request, vehicle)

    patch = put

    def delete(self, request, vehicle_id):
        vehicle = self.get_vehicle(vehicle_id)
        if vehicle is None:
            return self.not_found()
        open_runs = vehicle.assignments.exclude(status__in=DeliveryAssignment.CLOSED_STATUSES)
        if open_runs.exists():
            return Response(
                {'error': 'Vehicle has deliveries in progress'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        vehicle.delete()
        logger.info("Vehicle %s removed by user %s", vehicle_id, request.user.pk)
        return Response({'success': True})


class MaintenanceRecordView(APIView):
    permission_classes = [IsBackOfficeRole]

    def post(self, request, vehicle_id):
        fields = ('date', 'description', 'cost', 'nextMaintenanceDate')
        if any(_blank(request.data.get(field)) for field in fields):
            return Response({'error': 'Missing required fields'}, status=status.HTTP_400_BAD_REQUEST)

        vehicle = Vehicle.objects.filter(pk=vehicle_id).first()
        if vehicle is None:
            return Response({'error': 'Vehicle not found'}, status=status.HTTP_404_NOT_FOUND)

        serializer = MaintenanceRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(vehicle=vehicle)
        return Response(VehicleSerializer(vehicle_queryset().get(pk=vehicle.pk)).data, status=status.HTTP_201_CREATED)


class AssignInputSerializer(serializers.Serializer):
    vehicleId = serializers.IntegerField()
    orderId = serializers.IntegerField()
    scheduledDeliveryDate = serializers.DateTimeField(required=False)
    status = serializers.CharField(required=False)
    deliveryNotes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AssignmentView(APIView):
    """Which vehicle carries an order (GET), assign one (POST), record progress (PUT)."""

    permission_classes = [IsBackOfficeRole]

    def error(self, exc):
        return Response({'error': exc.error}, status=exc.status_code)

    def vehicle_response(self, vehicle_id):
        return Response(VehicleSerializer(vehicle_queryset().get(pk=vehicle_id)).data)

    def get(self, request):
        order_id = request.query_params.get('orderId')
        if not order_id:
            return Response({'error': 'Order ID is required'}, status=status.HTTP_400_BAD_REQUEST)
        vehicle = vehicle_queryset().filter(assignments__order_id=order_id).first() if order_id.isdigit() else None
        return Response({'vehicle': VehicleSerializer(vehicle).data if vehicle else None})

    def post(self, request):
        if any(_blank(request.data.get(field)) for field in ('vehicleId', 'orderId', 'scheduledDeliveryDate')):
            return Response(
                {'error': 'Vehicle ID, Order ID and delivery date are required'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = AssignInputSerializer(data=request.data)
        data.is_valid(raise_exception=True)
        try:
            assignment = assign_order(
                data.validated_data['vehicleId'],
                data.validated_data['orderId'],
                data.validated_data['scheduledDeliveryDate'],
            )
        except AssignmentError as exc:
            return self.error(exc)
        return self.vehicle_response(assignment.vehicle_id)

    def put(self, request):
        if any(_blank(request.data.get(field)) for field in ('vehicleId', 'orderId', 'status')):
            return Response(
                {'error': 'Vehicle ID, Order ID and status are required'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = AssignInputSerializer(data=request.data)
        data.is_valid(raise_exception=True)
        try:
            assignment = update_assignment(
                data.validated_data['vehicleId'],
                data.validated_data['orderId'],
                data.validated_data['status'],
                data.validated_data.get('deliveryNotes'),
            )
        except AssignmentError as exc:
            return self.error(exc)
        return self.vehicle_response(assignment.vehicle_id)
