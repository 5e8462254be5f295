from django.contrib import admin
from django.utils.html import format_html

from .models import Tenant, HotelSettings, SubscriptionStatus


class HotelSettingsInline(admin.StackedInline):
    model = HotelSettings
    can_delete = False


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['hotel_name', 'hotel_slug', 'city', 'status_badge', 'trial_end', 'created_at']
    list_filter = ['subscription_status', 'country', 'created_at']
    search_fields = ['hotel_name', 'hotel_slug', 'email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [HotelSettingsInline]

    def status_badge(self, obj):
        """Display subscription status as colored badge."""
        colors = {
            SubscriptionStatus.ACTIVE: '#6B8E5E',
            SubscriptionStatus.TRIALING: '#E5C49A',
            SubscriptionStatus.SUSPENDED: '#B85C5C',
            SubscriptionStatus.CANCELLED: '#999',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.subscription_status, '#999'),
            obj.get_subscription_status_display(),
        )
    status_badge.short_description = 'Subscription'
    status_badge.admin_order_field = 'subscription_status'
