"""Database models for users and their period-billing history."""

from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models

phone_validator = RegexValidator(
    regex=r'^\d{8,}$',
    message='Enter a valid phone number (at least 8 digits).',
)


def default_notification_preferences():
    return {'orderUpdates': True, 'promotions': True}


class User(AbstractUser):
    """Custom user model.

    Extends Django's :class:`~django.contrib.auth.models.AbstractUser` with:
    - ``role`` for back-office access (admin, accounting, logistics)
    - period billing flags (``is_period_paid_user`` + ``payment_period``)
    - a bilingual default ``address`` and preferred ``language``
    """

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        ACCOUNTING = 'accounting', 'Accounting'
        LOGISTICS = 'logistics', 'Logistics'
        USER = 'user', 'User'

    class PaymentPeriod(models.TextChoices):
        WEEKLY = 'weekly', 'Weekly'
        MONTHLY = 'monthly', 'Monthly'

    BACK_OFFICE_ROLES = {Role.ADMIN, Role.ACCOUNTING, Role.LOGISTICS}

    name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True, validators=[phone_validator])
    address = models.JSONField(null=True, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)
    language = models.CharField(max_length=10, default='en')
    is_period_paid_user = models.BooleanField(default=False)
    payment_period = models.CharField(max_length=10, choices=PaymentPeriod.choices, null=True, blank=True)
    notification_preferences = models.JSONField(default=default_notification_preferences, blank=True)

    def __str__(self):
        return self.email or self.username

    @property
    def is_admin(self) -> bool:
        return bool(self.is_superuser or self.is_staff or self.role == self.Role.ADMIN)

    @property
    def is_back_office(self) -> bool:
        return self.is_admin or self.role in self.BACK_OFFICE_ROLES

    @property
    def display_name(self) -> str:
        return self.name or self.get_full_name() or self.email


class PaymentHistory(models.Model):
    """One billing window of a period-paid user, pointing at its invoice."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='payment_history')
    period_start = models.DateTimeField()
    period_end = models.DateTimeField()
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(max_length=20, default='pending')
    invoice = models.ForeignKey('invoices.Invoice', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Payment History"
        ordering = ['-period_start']
        constraints = [
            models.UniqueConstraint(fields=['user', 'period_start', 'period_end'], name='unique_payment_window'),
        ]

    def __str__(self):
        return f"{self.user} {self.period_start:%Y-%m-%d} - {self.period_end:%Y-%m-%d}"
