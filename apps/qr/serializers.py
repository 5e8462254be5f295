from rest_framework import serializers

from .models import (
    QRCode,
    ServiceRequest,
    RequestMessage,
    RequestPriority,
    RequestStatus,
    ScanType,
    ServiceType,
    SERVICE_ENDPOINTS,
)
from .services import portal_url


class QRCodeSerializer(serializers.ModelSerializer):
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)
    portal_url = serializers.SerializerMethodField()

    class Meta:
        model = QRCode
        fields = [
            'id',
            'qr_token',
            'label',
            'room',
            'room_number',
            'scan_type',
            'services',
            'is_active',
            'scan_count',
            'last_scanned_at',
            'portal_url',
            'created_at',
        ]
        read_only_fields = fields

    def get_portal_url(self, obj) -> str:
        return portal_url(obj)


class QRCodeCreateSerializer(serializers.Serializer):
    label = serializers.CharField(max_length=120)
    room = serializers.UUIDField(required=False, allow_null=True, default=None)
    scan_type = serializers.ChoiceField(choices=ScanType.choices, default=ScanType.ROOM)
    services = serializers.ListField(
        child=serializers.ChoiceField(choices=sorted(SERVICE_ENDPOINTS)),
        required=False,
        allow_empty=False,
    )

    def validate(self, attrs):
        if attrs['scan_type'] == ScanType.ROOM and not attrs['room']:
            raise serializers.ValidationError({'room': 'Room codes need a room'})
        return attrs


class RequestMessageSerializer(serializers.ModelSerializer):
    staff_email = serializers.EmailField(source='staff_user.email', read_only=True, default=None)

    class Meta:
        model = RequestMessage
        fields = ['id', 'sender', 'staff_email', 'message', 'created_at']
        read_only_fields = fields


class ServiceRequestSerializer(serializers.ModelSerializer):
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)
    assigned_to_email = serializers.EmailField(source='assigned_to.email', read_only=True, default=None)

    class Meta:
        model = ServiceRequest
        fields = [
            'id',
            'room',
            'room_number',
            'service_type',
            'request_details',
            'status',
            'priority',
            'assigned_team',
            'assigned_to',
            'assigned_to_email',
            'notes',
            'created_by_guest',
            'folio_charge',
            'completed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ServiceRequestDetailSerializer(ServiceRequestSerializer):
    messages = RequestMessageSerializer(many=True, read_only=True)

    class Meta(ServiceRequestSerializer.Meta):
        fields = ServiceRequestSerializer.Meta.fields + ['messages']
        read_only_fields = fields


class GuestRequestSerializer(serializers.ModelSerializer):
    """What a guest sees of their own request."""

    messages = RequestMessageSerializer(many=True, read_only=True)

    class Meta:
        model = ServiceRequest
        fields = [
            'id',
            'guest_session_id',
            'service_type',
            'request_details',
            'status',
            'assigned_team',
            'messages',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class GuestRequestCreateSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default='')
    priority = serializers.ChoiceField(choices=RequestPriority.choices, default=RequestPriority.NORMAL)
    details = serializers.DictField(required=False, default=dict)


class GuestSessionSerializer(serializers.Serializer):
    session = serializers.CharField(max_length=64)


class GuestMessageSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=64)
    message = serializers.CharField(max_length=2000)


class StaffMessageSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=2000)


class RequestAssignSerializer(serializers.Serializer):
    assignee = serializers.UUIDField()


class RequestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RequestStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class RequestNoteSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class RequestFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RequestStatus.choices, required=False)
    service_type = serializers.ChoiceField(choices=ServiceType.choices, required=False)
    team = serializers.CharField(required=False)
    room = serializers.UUIDField(required=False)
    open = serializers.BooleanField(required=False, default=False)
    updated_since = serializers.DateTimeField(required=False)


class RequestAnalyticsQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        if attrs.get('start_date') and attrs.get('end_date') and attrs['start_date'] > attrs['end_date']:
            raise serializers.ValidationError({'end_date': 'end_date must not be before start_date'})
        return attrs


# Response serializers for API documentation
class PortalInfoSerializer(serializers.Serializer):
    hotel_name = serializers.CharField()
    logo_url = serializers.CharField()
    brand_colors = serializers.DictField()
    currency = serializers.CharField()
    label = serializers.CharField()
    scan_type = serializers.CharField()
    room_number = serializers.CharField(allow_null=True)
    services = serializers.ListField(child=serializers.CharField())


class ServiceTypeCountSerializer(serializers.Serializer):
    service_type = serializers.CharField()
    count = serializers.IntegerField()


class RequestAnalyticsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    open = serializers.IntegerField()
    by_service_type = ServiceTypeCountSerializer(many=True)
    average_completion_minutes = serializers.FloatField(allow_null=True)
