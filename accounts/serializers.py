"""Serializers for the accounts app.

Includes:
- Registration with strong validation
- Profile read/update for the signed-in user
- Period-billing flags and user accounts edited from the back office
"""

import re

import phonenumbers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from core.i18n import SUPPORTED_LANGUAGES, normalize_bilingual
from .models import PaymentHistory

User = get_user_model()


def normalize_phone(value: str) -> str:
    """Reduce a phone number to its digits.

    International numbers (leading ``+`` or ``00``) are checked with
    ``phonenumbers`` and stored as country code + national number.
    """

    phone_input = str(value or '').strip()
    if not phone_input:
        return ''

    clean_phone = re.sub(r'(?<!^)\+|[^\d+]', '', phone_input)
    if clean_phone.startswith('00'):
        clean_phone = '+' + clean_phone[2:]

    if clean_phone.startswith('+'):
        try:
            parsed = phonenumbers.parse(clean_phone, None)
        except phonenumbers.NumberParseException:
            raise serializers.ValidationError(f"Phone number {phone_input} is not valid.")
        if not phonenumbers.is_valid_number(parsed):
            raise serializers.ValidationError(
                f"Phone number {phone_input} is not valid. Include the country code, e.g. +886."
            )
        return f"{parsed.country_code}{parsed.national_number}"

    if not re.match(r'^\d{8,}$', clean_phone):
        raise serializers.ValidationError("Phone number must have at least 8 digits.")
    return clean_phone


class RegisterSerializer(serializers.ModelSerializer):
    """Create a new storefront user with strong validation."""

    password = serializers.CharField(write_only=True)
    phone = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ('username', 'password', 'email', 'name', 'phone')

    def validate_username(self, value):
        if not re.match(r'^[a-zA-Z0-9._]+$', value):
            raise serializers.ValidationError("Username may only contain letters, digits, dots and underscores.")
        if len(value) < 4:
            raise serializers.ValidationError("Username must be at least 4 characters long.")
        return value

    def validate_email(self, value):
        value = value.lower().strip()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate_phone(self, value):
        return normalize_phone(value)

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user


class UserProfileSerializer(serializers.ModelSerializer):
    """Signed-in user's profile, exposed with the storefront's camelCase keys."""

    isPeriodPaidUser = serializers.BooleanField(source='is_period_paid_user', read_only=True)
    paymentPeriod = serializers.CharField(source='payment_period', read_only=True)
    notificationPreferences = serializers.JSONField(source='notification_preferences', required=False)
    admin = serializers.BooleanField(source='is_admin', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'name', 'phone', 'address', 'language', 'role', 'admin',
            'isPeriodPaidUser', 'paymentPeriod', 'notificationPreferences',
        ]
        read_only_fields = ['id', 'username', 'email', 'role']

    def validate_phone(self, value):
        return normalize_phone(value)

    def validate_language(self, value):
        if value not in SUPPORTED_LANGUAGES:
            raise serializers.ValidationError(f"Language must be one of {', '.join(SUPPORTED_LANGUAGES)}.")
        return value

    def validate_address(self, value):
        if value is None:
            return None
        address = normalize_bilingual(value)
        coordinates = value.get('coordinates') if isinstance(value, dict) else None
        if coordinates:
            address['coordinates'] = coordinates
        return address


class PaymentHistorySerializer(serializers.ModelSerializer):
    periodStart = serializers.DateTimeField(source='period_start')
    periodEnd = serializers.DateTimeField(source='period_end')
    invoiceNumber = serializers.ReadOnlyField(source='invoice.invoice_number')

    class Meta:
        model = PaymentHistory
        fields = ['id', 'periodStart', 'periodEnd', 'amount', 'status', 'invoiceNumber']


class PeriodUserSerializer(serializers.ModelSerializer):
    """Back-office view of a user's period billing settings."""

    isPeriodPaidUser = serializers.BooleanField(source='is_period_paid_user')
    paymentPeriod = serializers.ChoiceField(
        source='payment_period',
        choices=User.PaymentPeriod.choices,
        allow_null=True,
        required=False,
    )
    paymentHistory = PaymentHistorySerializer(source='payment_history', many=True, read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'phone', 'isPeriodPaidUser', 'paymentPeriod', 'paymentHistory']
        read_only_fields = ['id', 'email', 'name', 'phone']

    def validate(self, attrs):
        enabled = attrs.get('is_period_paid_user', getattr(self.instance, 'is_period_paid_user', False))
        period = attrs.get('payment_period', getattr(self.instance, 'payment_period', None))
        if enabled and not period:
            raise serializers.ValidationError({'paymentPeriod': 'A payment period is required for period-paid users.'})
        if not enabled:
            attrs['payment_period'] = None
        return attrs


class AdminUserSerializer(serializers.ModelSerializer):
    """User record as the back office manages it; the password never leaves the server."""

    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=User.Role.choices, required=False)
    admin = serializers.BooleanField(source='is_staff', required=False)
    isPeriodPaidUser = serializers.BooleanField(source='is_period_paid_user', read_only=True)
    paymentPeriod = serializers.CharField(source='payment_period', read_only=True)
    createdAt = serializers.DateTimeField(source='date_joined', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'name', 'phone', 'password', 'role', 'admin', 'language',
            'isPeriodPaidUser', 'paymentPeriod', 'createdAt',
        ]
        read_only_fields = ['id', 'username', 'language']
        extra_kwargs = {'email': {'validators': []}}

    def validate_email(self, value):
        return value.lower().strip()

    def validate_phone(self, value):
        return normalize_phone(value)

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(username=validated_data['email'], **validated_data)
        user.set_password(password)
        user.save()
        return user
