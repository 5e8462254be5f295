from decimal import Decimal

from rest_framework import serializers

from .models import WorkOrder, WorkOrderCategory, WorkOrderPriority, WorkOrderStatus


class WorkOrderSerializer(serializers.ModelSerializer):
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)
    assigned_to_email = serializers.EmailField(source='assigned_to.email', read_only=True, default=None)

    class Meta:
        model = WorkOrder
        fields = [
            'id',
            'work_order_number',
            'room',
            'room_number',
            'title',
            'description',
            'category',
            'priority',
            'status',
            'assigned_to',
            'assigned_to_email',
            'assigned_at',
            'estimated_hours',
            'estimated_cost',
            'actual_hours',
            'actual_cost',
            'completed_at',
            'completion_notes',
            'escalation_reason',
            'qr_request',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class WorkOrderCreateSerializer(serializers.Serializer):
    room = serializers.UUIDField(required=False, allow_null=True, default=None)
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    category = serializers.ChoiceField(choices=WorkOrderCategory.choices, default=WorkOrderCategory.GENERAL)
    priority = serializers.ChoiceField(choices=WorkOrderPriority.choices, default=WorkOrderPriority.MEDIUM)
    estimated_hours = serializers.DecimalField(
        max_digits=6, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True, default=None
    )
    estimated_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True, default=None
    )
    take_room_offline = serializers.BooleanField(default=False)

    def validate(self, attrs):
        if attrs['take_room_offline'] and not attrs['room']:
            raise serializers.ValidationError({'room': 'A room is required to take it offline'})
        return attrs


class WorkOrderCompleteSerializer(serializers.Serializer):
    completion_notes = serializers.CharField(required=False, allow_blank=True, default='')
    actual_hours = serializers.DecimalField(
        max_digits=6, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True, default=None
    )
    actual_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True, default=None
    )


class WorkOrderEscalateSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)


class WorkOrderCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class WorkOrderFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=WorkOrderStatus.choices, required=False)
    priority = serializers.ChoiceField(choices=WorkOrderPriority.choices, required=False)
    category = serializers.ChoiceField(choices=WorkOrderCategory.choices, required=False)
    room = serializers.UUIDField(required=False)
    open = serializers.BooleanField(required=False, default=False)
    mine = serializers.BooleanField(required=False, default=False)


# Response serializers for API documentation
class MaintenanceStatsSerializer(serializers.Serializer):
    open_issues = serializers.IntegerField()
    completed_today = serializers.IntegerField()
    pending_critical = serializers.IntegerField()
    average_resolution_minutes = serializers.FloatField(allow_null=True)
