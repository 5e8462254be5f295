from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import Tenant, HotelSettings


class TenantSerializer(serializers.ModelSerializer):
    is_operational = serializers.BooleanField(read_only=True)
    staff_count = serializers.SerializerMethodField()

    class Meta:
        model = Tenant
        fields = [
            'id',
            'hotel_name',
            'hotel_slug',
            'email',
            'phone',
            'address',
            'city',
            'country',
            'currency',
            'timezone',
            'logo_url',
            'brand_colors',
            'subscription_status',
            'trial_start',
            'trial_end',
            'setup_completed',
            'is_operational',
            'staff_count',
            'created_at',
        ]
        read_only_fields = [
            'id',
            'hotel_slug',
            'subscription_status',
            'trial_start',
            'trial_end',
            'created_at',
        ]

    def get_staff_count(self, obj) -> int:
        return obj.staff.filter(is_active=True).count()


class TenantCreateSerializer(serializers.Serializer):
    """Input for creating a hotel together with its owner account."""

    hotel_name = serializers.CharField(max_length=200)
    owner_email = serializers.EmailField()
    owner_password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'},
    )
    owner_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    trial = serializers.BooleanField(default=True)


class SuspendTenantSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class HotelSettingsSerializer(serializers.ModelSerializer):
    vat_applicable_to = serializers.ListField(child=serializers.CharField(), required=False)
    service_applicable_to = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = HotelSettings
        fields = [
            'vat_rate',
            'service_charge_rate',
            'tax_inclusive',
            'service_charge_inclusive',
            'vat_applicable_to',
            'service_applicable_to',
            'show_tax_breakdown',
            'check_in_time',
            'check_out_time',
            'early_checkin_fee',
            'late_checkout_fee',
            'invoice_prefix',
            'receipt_prefix',
            'next_invoice_seq',
            'updated_at',
        ]
        read_only_fields = ['next_invoice_seq', 'updated_at']
