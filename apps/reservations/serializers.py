from decimal import Decimal

from rest_framework import serializers

from .models import Guest, Reservation, ReservationStatus


class GuestSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Guest
        fields = [
            'id',
            'first_name',
            'last_name',
            'full_name',
            'email',
            'phone',
            'nationality',
            'id_type',
            'id_number',
            'vip_status',
            'tax_exempt',
            'is_blacklisted',
            'blacklist_reason',
            'total_stays',
            'total_spent',
            'last_stay_date',
            'notes',
            'created_at',
        ]
        read_only_fields = [
            'id',
            'is_blacklisted',
            'blacklist_reason',
            'total_stays',
            'total_spent',
            'last_stay_date',
            'created_at',
        ]


class GuestBlacklistSerializer(serializers.Serializer):
    is_blacklisted = serializers.BooleanField()
    reason = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['is_blacklisted'] and not attrs['reason'].strip():
            raise serializers.ValidationError({'reason': 'A reason is required to blacklist a guest'})
        return attrs


class ReservationSerializer(serializers.ModelSerializer):
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)
    room_type_name = serializers.CharField(source='room_type.name', read_only=True, default=None)
    nights = serializers.IntegerField(read_only=True)

    class Meta:
        model = Reservation
        fields = [
            'id',
            'reservation_number',
            'guest',
            'guest_name',
            'guest_email',
            'guest_phone',
            'room',
            'room_number',
            'room_type',
            'room_type_name',
            'check_in_date',
            'check_out_date',
            'nights',
            'adults',
            'children',
            'room_rate',
            'total_amount',
            'deposit_amount',
            'payment_status',
            'status',
            'booking_source',
            'special_requests',
            'checked_in_at',
            'checked_out_at',
            'cancelled_at',
            'cancellation_reason',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ReservationCreateSerializer(serializers.Serializer):
    guest_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    guest_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    guest_email = serializers.EmailField(required=False, allow_blank=True, default='')
    guest_phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    room_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    room_type_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    adults = serializers.IntegerField(min_value=1, default=1)
    children = serializers.IntegerField(min_value=0, default=0)
    room_rate = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False,
        allow_null=True,
        default=None,
    )
    deposit_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        default=Decimal('0.00'),
    )
    booking_source = serializers.CharField(max_length=40, default='front_desk')
    special_requests = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['check_out_date'] <= attrs['check_in_date']:
            raise serializers.ValidationError({
                'check_out_date': 'Check-out date must be after check-in date'
            })
        if not attrs['guest_id'] and not attrs['guest_name'].strip():
            raise serializers.ValidationError({
                'guest_name': 'Provide a guest name or an existing guest'
            })
        return attrs


class AssignRoomSerializer(serializers.Serializer):
    room_id = serializers.UUIDField()


class CheckOutSerializer(serializers.Serializer):
    force = serializers.BooleanField(default=False)


class CancelReservationSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)


class ExtendStaySerializer(serializers.Serializer):
    new_check_out = serializers.DateField()


class ReservationFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ReservationStatus.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    guest = serializers.UUIDField(required=False)
    room = serializers.UUIDField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs.get('date_from') and attrs.get('date_to') and attrs['date_from'] > attrs['date_to']:
            raise serializers.ValidationError({'date_to': 'date_to must not be before date_from'})
        return attrs


class BoardQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
