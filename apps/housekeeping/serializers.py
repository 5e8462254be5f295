from rest_framework import serializers

from .models import (
    HousekeepingTask,
    Supply,
    SupplyUsage,
    SupplyCategory,
    TaskPriority,
    TaskStatus,
    TaskType,
)


class HousekeepingTaskSerializer(serializers.ModelSerializer):
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)
    assigned_to_email = serializers.EmailField(source='assigned_to.email', read_only=True, default=None)

    class Meta:
        model = HousekeepingTask
        fields = [
            'id',
            'room',
            'room_number',
            'title',
            'description',
            'task_type',
            'priority',
            'status',
            'assigned_to',
            'assigned_to_email',
            'assigned_at',
            'started_at',
            'completed_at',
            'estimated_minutes',
            'actual_minutes',
            'checklist',
            'notes',
            'qr_request',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class TaskCreateSerializer(serializers.Serializer):
    room = serializers.UUIDField(required=False, allow_null=True, default=None)
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    task_type = serializers.ChoiceField(choices=TaskType.choices, default=TaskType.CLEANING)
    priority = serializers.ChoiceField(choices=TaskPriority.choices, default=TaskPriority.MEDIUM)
    estimated_minutes = serializers.IntegerField(min_value=1, default=30)
    checklist = serializers.ListField(child=serializers.DictField(), required=False, default=list)


class TaskAssignSerializer(serializers.Serializer):
    assignee = serializers.UUIDField()


class TaskNoteSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class TaskFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TaskStatus.choices, required=False)
    task_type = serializers.ChoiceField(choices=TaskType.choices, required=False)
    priority = serializers.ChoiceField(choices=TaskPriority.choices, required=False)
    room = serializers.UUIDField(required=False)
    assigned_to = serializers.UUIDField(required=False)
    mine = serializers.BooleanField(required=False, default=False)


class SupplySerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Supply
        fields = [
            'id',
            'name',
            'category',
            'unit',
            'current_stock',
            'minimum_stock',
            'unit_cost',
            'is_active',
            'is_low_stock',
            'updated_at',
        ]
        read_only_fields = ['id', 'is_low_stock', 'updated_at']

    def validate_name(self, value):
        tenant = self.context['request'].user.tenant
        queryset = Supply.objects.filter(tenant=tenant, name__iexact=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError('A supply with this name already exists')
        return value


class SupplyUsageSerializer(serializers.ModelSerializer):
    supply_name = serializers.CharField(source='supply.name', read_only=True)

    class Meta:
        model = SupplyUsage
        fields = ['id', 'supply', 'supply_name', 'quantity', 'room', 'task', 'used_by', 'notes', 'used_at']
        read_only_fields = fields


class RecordUsageSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    room = serializers.UUIDField(required=False, allow_null=True, default=None)
    task = serializers.UUIDField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class LowStockQuerySerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=SupplyCategory.choices, required=False)


# Response serializers for API documentation
class HousekeepingStatsSerializer(serializers.Serializer):
    pending = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    delayed = serializers.IntegerField()
    completed_today = serializers.IntegerField()
    dirty_rooms = serializers.IntegerField()
    out_of_service_rooms = serializers.IntegerField()
    maintenance_rooms = serializers.IntegerField()
