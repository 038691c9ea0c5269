from django.contrib import admin

from .models import FeatureItem


@admin.register(FeatureItem)
class FeatureItemAdmin(admin.ModelAdmin):
    list_display = ('__str__', 'icon', 'order', 'updated_at')
    list_editable = ('order',)
