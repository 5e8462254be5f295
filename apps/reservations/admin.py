from django.contrib import admin
from django.utils.html import format_html

from .models import Guest, Reservation, ReservationStatus


STATUS_COLORS = {
    ReservationStatus.PENDING: '#E5C49A',
    ReservationStatus.CONFIRMED: '#A47449',
    ReservationStatus.CHECKED_IN: '#5C7AB8',
    ReservationStatus.CHECKED_OUT: '#6B8E5E',
    ReservationStatus.CANCELLED: '#888',
    ReservationStatus.NO_SHOW: '#B85C5C',
}


@admin.register(Guest)
class GuestAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'tenant', 'email', 'phone', 'vip_status', 'is_blacklisted', 'total_stays']
    list_filter = ['vip_status', 'is_blacklisted', 'tax_exempt', 'tenant']
    search_fields = ['first_name', 'last_name', 'email', 'phone']


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = [
        'reservation_number',
        'guest_name',
        'room',
        'check_in_date',
        'check_out_date',
        'status_badge',
        'payment_status',
        'total_amount',
    ]
    list_filter = ['status', 'payment_status', 'booking_source', 'tenant']
    search_fields = ['reservation_number', 'guest_name', 'guest_email', 'guest_phone']
    date_hierarchy = 'check_in_date'
    readonly_fields = [
        'reservation_number',
        'checked_in_at',
        'checked_in_by',
        'checked_out_at',
        'checked_out_by',
        'cancelled_at',
        'cancelled_by',
    ]

    def status_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#888'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
