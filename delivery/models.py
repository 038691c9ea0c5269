"""Store-wide delivery settings."""

from django.core.validators import MinValueValidator
from django.db import models


class DeliverySettings(models.Model):
    """Singleton row holding the delivery methods offered at checkout.

    ``delivery_methods`` is an ordered list of
    ``{"name": {"en": ..., "zh-TW": ...}, "cost": number}``. Orders keep the
    index of the chosen method, so the order of this list matters.
    """

    delivery_methods = models.JSONField(default=list, blank=True)
    free_delivery_threshold = models.DecimalField(
        max_digits=12, decimal_places=2, default=100, validators=[MinValueValidator(0)],
    )
    bank_account_details = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Delivery Settings"

    def __str__(self):
        return f"Delivery settings ({len(self.delivery_methods or [])} methods)"

    @classmethod
    def load(cls):
        """Return the settings row, or ``None`` when it was never created."""
        return cls.objects.order_by('pk').first()

    @classmethod
    def get_or_create_default(cls):
        settings = cls.load()
        if settings is None:
            settings = cls.objects.create(delivery_methods=[], free_delivery_threshold=100, bank_account_details='')
        return settings

    def method_at(self, index):
        """Delivery method at ``index`` or ``None`` when out of bounds."""
        methods = self.delivery_methods or []
        if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(methods):
            return methods[index]
        return None
