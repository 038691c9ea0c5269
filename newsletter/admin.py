from django.contrib import admin

from .models import Subscriber


@admin.register(Subscriber)
class SubscriberAdmin(admin.ModelAdmin):
    list_display = ('email', 'source', 'is_active', 'subscribed_at', 'unsubscribed_at')
    list_filter = ('is_active', 'source')
    search_fields = ('email',)
