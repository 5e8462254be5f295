from decimal import Decimal

from rest_framework import serializers

from .models import (
    ChargeType,
    Folio,
    FolioCharge,
    FolioStatus,
    Payment,
    PaymentMethod,
    PaymentRecordStatus,
    ShiftSession,
    ShiftStatus,
)


class FolioChargeSerializer(serializers.ModelSerializer):
    posted_by_email = serializers.EmailField(source='posted_by.email', read_only=True, default=None)

    class Meta:
        model = FolioCharge
        fields = [
            'id',
            'charge_type',
            'description',
            'base_amount',
            'service_charge_amount',
            'vat_amount',
            'amount',
            'is_taxable',
            'is_service_chargeable',
            'reference_type',
            'reference_id',
            'posted_by_email',
            'created_at',
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    processed_by_email = serializers.EmailField(source='processed_by.email', read_only=True, default=None)
    folio_number = serializers.CharField(source='folio.folio_number', read_only=True, default=None)

    class Meta:
        model = Payment
        fields = [
            'id',
            'folio',
            'folio_number',
            'amount',
            'payment_method',
            'reference',
            'status',
            'notes',
            'processed_by_email',
            'shift',
            'created_at',
        ]
        read_only_fields = fields


class FolioSerializer(serializers.ModelSerializer):
    reservation_number = serializers.CharField(
        source='reservation.reservation_number',
        read_only=True,
        default=None,
    )
    guest_name = serializers.CharField(source='reservation.guest_name', read_only=True, default=None)

    class Meta:
        model = Folio
        fields = [
            'id',
            'folio_number',
            'invoice_number',
            'reservation',
            'reservation_number',
            'guest_name',
            'status',
            'total_charges',
            'total_payments',
            'balance',
            'closed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class FolioDetailSerializer(FolioSerializer):
    charges = FolioChargeSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta(FolioSerializer.Meta):
        fields = FolioSerializer.Meta.fields + ['charges', 'payments']
        read_only_fields = fields


class FolioFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=FolioStatus.choices, required=False)
    reservation = serializers.UUIDField(required=False)
    has_balance = serializers.BooleanField(required=False, allow_null=True, default=None)


class PostChargeSerializer(serializers.Serializer):
    charge_type = serializers.ChoiceField(choices=ChargeType.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(max_length=255)
    is_taxable = serializers.BooleanField(default=True)
    is_service_chargeable = serializers.BooleanField(default=True)


class RecordPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    force = serializers.BooleanField(default=False)

    def validate_payment_method(self, value):
        if value == PaymentMethod.ROOM_FOLIO:
            raise serializers.ValidationError('A folio cannot be settled by charging it to a room')
        return value


class CloseFolioSerializer(serializers.Serializer):
    force = serializers.BooleanField(default=False)


class RefundSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)


class PaymentFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentRecordStatus.choices, required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    folio = serializers.UUIDField(required=False)
    shift = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        if attrs.get('date_from') and attrs.get('date_to') and attrs['date_from'] > attrs['date_to']:
            raise serializers.ValidationError({'date_to': 'date_to must not be before date_from'})
        return attrs


class TaxPreviewSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    charge_type = serializers.ChoiceField(choices=ChargeType.choices, default=ChargeType.ROOM)
    is_taxable = serializers.BooleanField(default=True)
    is_service_chargeable = serializers.BooleanField(default=True)
    guest_tax_exempt = serializers.BooleanField(default=False)


class ShiftSessionSerializer(serializers.ModelSerializer):
    staff_email = serializers.EmailField(source='staff.email', read_only=True)
    authorized_by_email = serializers.EmailField(source='authorized_by.email', read_only=True, default=None)

    class Meta:
        model = ShiftSession
        fields = [
            'id',
            'staff',
            'staff_email',
            'role',
            'status',
            'start_time',
            'end_time',
            'opening_cash',
            'cash_total',
            'expected_cash',
            'cash_variance',
            'pos_total',
            'handover_notes',
            'unresolved_items',
            'authorized_by_email',
        ]
        read_only_fields = fields


class StartShiftSerializer(serializers.Serializer):
    opening_cash = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        default=Decimal('0.00'),
    )


class CloseShiftSerializer(serializers.Serializer):
    counted_cash = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    handover_notes = serializers.CharField(required=False, allow_blank=True, default='')
    authorized_by = serializers.UUIDField(required=False, allow_null=True, default=None)


class ShiftFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ShiftStatus.choices, required=False)
    staff = serializers.UUIDField(required=False)


# Response serializers for API documentation
class ChargeBreakdownSerializer(serializers.Serializer):
    base_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    service_charge_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    vat_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    service_charge_rate = serializers.DecimalField(max_digits=6, decimal_places=2)
    vat_rate = serializers.DecimalField(max_digits=6, decimal_places=2)


class FolioBreakdownSerializer(serializers.Serializer):
    folio_id = serializers.UUIDField()
    folio_number = serializers.CharField()
    status = serializers.CharField()
    by_charge_type = serializers.ListField(child=serializers.DictField())
    base_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    service_charge_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    vat_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_charges = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_payments = serializers.DecimalField(max_digits=12, decimal_places=2)
    payments_by_method = serializers.ListField(child=serializers.DictField())
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class ShiftSummarySerializer(serializers.Serializer):
    shift_id = serializers.UUIDField()
    staff_email = serializers.EmailField()
    status = serializers.CharField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField(allow_null=True)
    opening_cash = serializers.DecimalField(max_digits=12, decimal_places=2)
    cash_collected = serializers.DecimalField(max_digits=12, decimal_places=2)
    expected_cash = serializers.DecimalField(max_digits=12, decimal_places=2)
    pos_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_collected = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_count = serializers.IntegerField()
    totals_by_method = serializers.ListField(child=serializers.DictField())


class DoubleTaxChargeSerializer(serializers.Serializer):
    charge_id = serializers.UUIDField()
    folio_id = serializers.UUIDField()
    folio_number = serializers.CharField()
    description = serializers.CharField()
    nights = serializers.IntegerField()
    current_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    calculated_base_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    calculated_service_charge_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    calculated_vat_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    calculated_total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    difference = serializers.DecimalField(max_digits=12, decimal_places=2)
