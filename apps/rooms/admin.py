from django.contrib import admin
from django.utils.html import format_html

from .models import Room, RoomType, RoomStatus


STATUS_COLORS = {
    RoomStatus.AVAILABLE: '#6B8E5E',
    RoomStatus.OCCUPIED: '#5C7AB8',
    RoomStatus.RESERVED: '#A47449',
    RoomStatus.DIRTY: '#E5C49A',
    RoomStatus.CLEAN: '#8EC1A0',
    RoomStatus.MAINTENANCE: '#B85C5C',
    RoomStatus.OUT_OF_SERVICE: '#666',
}


@admin.register(RoomType)
class RoomTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'tenant', 'base_rate', 'max_occupancy', 'is_active']
    list_filter = ['is_active', 'tenant']
    search_fields = ['name']


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ['room_number', 'tenant', 'room_type', 'floor', 'status_badge', 'last_cleaned']
    list_filter = ['status', 'tenant', 'room_type']
    search_fields = ['room_number']

    def status_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#888'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
