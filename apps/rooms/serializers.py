from rest_framework import serializers

from .models import Room, RoomType, RoomStatus


class RoomTypeSerializer(serializers.ModelSerializer):
    room_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = RoomType
        fields = [
            'id',
            'name',
            'description',
            'base_rate',
            'max_occupancy',
            'amenities',
            'is_active',
            'room_count',
            'created_at',
        ]
        read_only_fields = ['id', 'created_at']

    def validate_name(self, value):
        tenant = self.context['request'].user.tenant
        queryset = RoomType.objects.filter(tenant=tenant, name__iexact=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError('A room type with this name already exists')
        return value


class RoomSerializer(serializers.ModelSerializer):
    room_type_name = serializers.CharField(source='room_type.name', read_only=True, default=None)
    base_rate = serializers.DecimalField(
        source='room_type.base_rate',
        max_digits=10,
        decimal_places=2,
        read_only=True,
        default=None,
    )

    class Meta:
        model = Room
        fields = [
            'id',
            'room_number',
            'floor',
            'room_type',
            'room_type_name',
            'base_rate',
            'status',
            'notes',
            'last_cleaned',
            'updated_at',
        ]
        read_only_fields = ['id', 'status', 'last_cleaned', 'updated_at']

    def validate_room_type(self, value):
        if value and value.tenant_id != self.context['request'].user.tenant_id:
            raise serializers.ValidationError('Unknown room type')
        return value

    def validate_room_number(self, value):
        tenant = self.context['request'].user.tenant
        queryset = Room.objects.filter(tenant=tenant, room_number=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError('A room with this number already exists')
        return value


class RoomFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RoomStatus.choices, required=False)
    room_type = serializers.UUIDField(required=False)
    floor = serializers.IntegerField(required=False)


class RoomStatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RoomStatus.choices)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class AvailabilityQuerySerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    room_type = serializers.UUIDField(required=False)

    def validate(self, attrs):
        if attrs['check_out'] <= attrs['check_in']:
            raise serializers.ValidationError({
                'check_out': 'Check-out date must be after check-in date'
            })
        return attrs


# Response serializers for API documentation
class InconsistencySerializer(serializers.Serializer):
    room_id = serializers.UUIDField()
    room_number = serializers.CharField()
    room_status = serializers.CharField()
    active_reservations = serializers.IntegerField()
    expected_status = serializers.CharField()
    inconsistent = serializers.BooleanField()
    reservation_ids = serializers.ListField(child=serializers.UUIDField())


class FixResultSerializer(serializers.Serializer):
    room_id = serializers.UUIDField()
    room_number = serializers.CharField()
    action = serializers.CharField()
    success = serializers.BooleanField()


class SyncResultSerializer(serializers.Serializer):
    room_id = serializers.UUIDField()
    room_number = serializers.CharField()
    current_status = serializers.CharField()
    correct_status = serializers.CharField()
