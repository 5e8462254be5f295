from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import User, Role


BADGE_STYLE = (
    '<span style="background: {}; color: white; padding: 3px 8px; '
    'border-radius: 10px; font-size: 11px;">{}</span>'
)

ROLE_COLORS = {
    Role.FRONT_DESK: '#C08A3E',
    Role.HOUSEKEEPING: '#7A6BA8',
    Role.MAINTENANCE: '#8A8A5C',
    Role.POS: '#B86B5C',
    Role.OWNER: '#A47449',
    Role.MANAGER: '#6B8E5E',
    Role.ACCOUNTANT: '#5C7AB8',
    Role.SUPER_ADMIN: '#2C1810',
}


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Staff administration.

    Lists staff per hotel with role and status badges and supports bulk
    activation. Temporary passwords are issued through the staff API, not here.
    """

    list_display = [
        'email',
        'display_name',
        'tenant',
        'role_badge',
        'is_active_badge',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'role',
        'is_active',
        'is_staff',
        'tenant__subscription_status',
        'must_change_password',
        'tenant',
    ]

    search_fields = [
        'email',
        'display_name',
        'tenant__hotel_name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'phone', 'department', 'password')
        }),
        ('Hotel', {
            'fields': ('tenant', 'role', 'must_change_password', 'reset_requested_at'),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Preferences', {
            'fields': ('preferences',),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'tenant', 'role', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login', 'reset_requested_at']
    filter_horizontal = ['groups', 'user_permissions']

    def role_badge(self, obj):
        return format_html(BADGE_STYLE, ROLE_COLORS.get(obj.role, '#888'), obj.get_role_display())
    role_badge.short_description = 'Role'
    role_badge.admin_order_field = 'role'

    def is_active_badge(self, obj):
        if obj.is_active:
            return format_html(BADGE_STYLE, '#6B8E5E', 'Active')
        return format_html(BADGE_STYLE, '#B85C5C', 'Suspended')
    is_active_badge.short_description = 'Status'
    is_active_badge.admin_order_field = 'is_active'

    actions = ['activate_users', 'deactivate_users']

    @admin.action(description='Activate selected users')
    def activate_users(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f'Activated {count} user(s).')

    @admin.action(description='Suspend selected users')
    def deactivate_users(self, request, queryset):
        """Suspend selected users (skips superusers)."""
        safe_queryset = queryset.filter(is_superuser=False)
        count = safe_queryset.update(is_active=False)
        skipped = queryset.count() - count
        msg = f'Suspended {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} superuser(s).'
        self.message_user(request, msg)

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('tenant')
