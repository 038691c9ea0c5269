from django.contrib import admin

from .models import DeliveryAssignment, MaintenanceRecord, Vehicle


class MaintenanceRecordInline(admin.TabularInline):
    model = MaintenanceRecord
    extra = 0


class DeliveryAssignmentInline(admin.TabularInline):
    model = DeliveryAssignment
    extra = 0
    raw_id_fields = ('order',)


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ('registration_no', 'make', 'model', 'body_type', 'assigned_location', 'status', 'driver_name')
    list_filter = ('status', 'assigned_location', 'body_type')
    search_fields = ('registration_no', 'chassis_no', 'driver_name')
    inlines = [MaintenanceRecordInline, DeliveryAssignmentInline]


@admin.register(DeliveryAssignment)
class DeliveryAssignmentAdmin(admin.ModelAdmin):
    list_display = ('order', 'vehicle', 'scheduled_delivery_date', 'status')
    list_filter = ('status',)
    raw_id_fields = ('order',)
