from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'tenant', 'action', 'resource_type', 'resource_id', 'actor_email']
    list_filter = ['action', 'resource_type', 'created_at']
    search_fields = ['resource_id', 'actor_email', 'description']
    date_hierarchy = 'created_at'
    readonly_fields = [f.name for f in AuditLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
