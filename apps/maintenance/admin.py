from django.contrib import admin
from django.utils.html import format_html

from .models import WorkOrder, WorkOrderPriority


PRIORITY_COLORS = {
    WorkOrderPriority.LOW: '#6B8E5E',
    WorkOrderPriority.MEDIUM: '#A47449',
    WorkOrderPriority.HIGH: '#E58A4A',
    WorkOrderPriority.CRITICAL: '#B85C5C',
}


@admin.register(WorkOrder)
class WorkOrderAdmin(admin.ModelAdmin):
    list_display = ['work_order_number', 'title', 'room', 'category', 'priority_badge', 'status', 'assigned_to', 'created_at']
    list_filter = ['status', 'priority', 'category', 'tenant']
    search_fields = ['work_order_number', 'title', 'room__room_number']
    readonly_fields = ['work_order_number', 'created_at', 'updated_at', 'completed_at']

    def priority_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            PRIORITY_COLORS.get(obj.priority, '#888'),
            obj.get_priority_display(),
        )
    priority_badge.short_description = 'Priority'
    priority_badge.admin_order_field = 'priority'
