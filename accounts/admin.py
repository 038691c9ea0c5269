from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User, PaymentHistory

if admin.site.is_registered(User):
    admin.site.unregister(User)


class PaymentHistoryInline(admin.TabularInline):
    model = PaymentHistory
    extra = 0
    readonly_fields = ('created_at',)


class CustomUserAdmin(UserAdmin):
    model = User
    list_display = ['username', 'email', 'name', 'role', 'is_period_paid_user', 'payment_period', 'is_staff']
    list_filter = UserAdmin.list_filter + ('role', 'is_period_paid_user')

    fieldsets = UserAdmin.fieldsets + (
        ('Role & Contact', {'fields': ('name', 'role', 'phone', 'address', 'language')}),
        ('Period billing', {'fields': ('is_period_paid_user', 'payment_period')}),
    )
    inlines = [PaymentHistoryInline]


admin.site.register(User, CustomUserAdmin)


@admin.register(PaymentHistory)
class PaymentHistoryAdmin(admin.ModelAdmin):
    list_display = ('user', 'period_start', 'period_end', 'amount', 'status', 'invoice')
    list_filter = ('status',)
