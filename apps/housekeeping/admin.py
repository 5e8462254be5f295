from django.contrib import admin
from django.utils.html import format_html

from .models import HousekeepingTask, Supply, SupplyUsage, TaskPriority


PRIORITY_COLORS = {
    TaskPriority.LOW: '#6B8E5E',
    TaskPriority.MEDIUM: '#A47449',
    TaskPriority.HIGH: '#E58A4A',
    TaskPriority.URGENT: '#B85C5C',
}


@admin.register(HousekeepingTask)
class HousekeepingTaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'room', 'task_type', 'priority_badge', 'status', 'assigned_to', 'created_at']
    list_filter = ['status', 'task_type', 'priority', 'tenant']
    search_fields = ['title', 'room__room_number']

    def priority_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            PRIORITY_COLORS.get(obj.priority, '#888'),
            obj.get_priority_display(),
        )
    priority_badge.short_description = 'Priority'
    priority_badge.admin_order_field = 'priority'


@admin.register(Supply)
class SupplyAdmin(admin.ModelAdmin):
    list_display = ['name', 'tenant', 'category', 'current_stock', 'minimum_stock', 'unit', 'is_active']
    list_filter = ['category', 'is_active', 'tenant']
    search_fields = ['name']


@admin.register(SupplyUsage)
class SupplyUsageAdmin(admin.ModelAdmin):
    list_display = ['supply', 'quantity', 'room', 'used_by', 'used_at']
    list_filter = ['supply__category']
