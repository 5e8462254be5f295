from django.contrib import admin
from django.utils.html import format_html

from .models import QRCode, ServiceRequest, RequestMessage, RequestStatus


STATUS_COLORS = {
    RequestStatus.PENDING: '#E58A4A',
    RequestStatus.ASSIGNED: '#A47449',
    RequestStatus.ACCEPTED: '#5E7E8E',
    RequestStatus.PREPARING: '#5E7E8E',
    RequestStatus.COMPLETED: '#6B8E5E',
    RequestStatus.CANCELLED: '#888888',
}


@admin.register(QRCode)
class QRCodeAdmin(admin.ModelAdmin):
    list_display = ['label', 'tenant', 'room', 'scan_type', 'is_active', 'scan_count', 'last_scanned_at']
    list_filter = ['scan_type', 'is_active', 'tenant']
    search_fields = ['label', 'qr_token', 'room__room_number']
    readonly_fields = ['qr_token', 'scan_count', 'last_scanned_at', 'created_at']


class RequestMessageInline(admin.TabularInline):
    model = RequestMessage
    extra = 0
    readonly_fields = ['sender', 'staff_user', 'message', 'created_at']


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    list_display = ['service_type', 'room', 'assigned_team', 'status_badge', 'priority', 'created_at']
    list_filter = ['status', 'service_type', 'assigned_team', 'tenant']
    search_fields = ['room__room_number', 'guest_session_id']
    inlines = [RequestMessageInline]

    def status_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#888'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
