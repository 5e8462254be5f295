from rest_framework import serializers

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuditLog
        fields = [
            'id',
            'action',
            'resource_type',
            'resource_id',
            'actor',
            'actor_email',
            'actor_role',
            'description',
            'metadata',
            'created_at',
        ]
        read_only_fields = fields


class AuditLogFilterSerializer(serializers.Serializer):
    """Validate query parameters for the audit listing."""

    resource_type = serializers.CharField(required=False)
    resource_id = serializers.CharField(required=False)
    action = serializers.CharField(required=False)
    actor = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'date_to must be after date_from'
            })
        return attrs
