from decimal import Decimal, InvalidOperation

from rest_framework import serializers

from core.i18n import normalize_bilingual
from .models import DeliverySettings


class DeliverySettingsSerializer(serializers.ModelSerializer):
    deliveryMethods = serializers.JSONField(source='delivery_methods', required=False)
    freeDeliveryThreshold = serializers.DecimalField(
        source='free_delivery_threshold', max_digits=12, decimal_places=2, min_value=0, required=False,
    )
    bankAccountDetails = serializers.CharField(source='bank_account_details', allow_blank=True, required=False)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = DeliverySettings
        fields = ['id', 'deliveryMethods', 'freeDeliveryThreshold', 'bankAccountDetails', 'updatedAt']

    def validate_deliveryMethods(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Delivery methods must be a list.")

        methods = []
        for position, method in enumerate(value):
            method = method if isinstance(method, dict) else {}
            try:
                cost = Decimal(str(method.get('cost') or 0))
            except InvalidOperation:
                raise serializers.ValidationError(f"Delivery method {position + 1} has an invalid cost.")
            if not cost.is_finite() or cost < 0:
                raise serializers.ValidationError(f"Delivery method {position + 1} has an invalid cost.")
            methods.append({
                'cost': int(cost) if cost == cost.to_integral_value() else float(cost),
                'name': normalize_bilingual(method.get('name')),
            })
        return methods
