from django.urls import path

from .views import AssignmentView, MaintenanceRecordView, VehicleDetailView, VehicleListView

urlpatterns = [
    path('', VehicleListView.as_view(), name='vehicle_list'),
    path('assign/', AssignmentView.as_view(), name='vehicle_assign'),
    path('<int:vehicle_id>/', VehicleDetailView.as_view(), name='vehicle_detail'),
    path('<int:vehicle_id>/maintenance/', MaintenanceRecordView.as_view(), name='vehicle_maintenance'),
]
