import uuid

from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """Append-only record of a state change made by staff or a system job."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        related_name='audit_entries',
        null=True,
        blank=True,
    )
    action = models.CharField(max_length=60)
    resource_type = models.CharField(max_length=40)
    resource_id = models.CharField(max_length=64, blank=True)

    # Actor snapshot survives user deletion
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='audit_entries',
        null=True,
        blank=True,
    )
    actor_email = models.EmailField(blank=True)
    actor_role = models.CharField(max_length=20, blank=True)

    description = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_log'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', '-created_at']),
            models.Index(fields=['resource_type', 'resource_id']),
            models.Index(fields=['action']),
        ]

    def __str__(self):
        who = self.actor_email or 'system'
        return f"{self.action} on {self.resource_type}:{self.resource_id} by {who}"
