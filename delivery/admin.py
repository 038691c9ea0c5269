from django.contrib import admin

from .models import DeliverySettings


@admin.register(DeliverySettings)
class DeliverySettingsAdmin(admin.ModelAdmin):
    list_display = ('__str__', 'free_delivery_threshold', 'updated_at')

    def has_add_permission(self, request):
        return not DeliverySettings.objects.exists()
