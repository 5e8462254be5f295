from decimal import Decimal
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class WorkOrderCategory(models.TextChoices):
    PLUMBING = 'plumbing', 'Plumbing'
    ELECTRICAL = 'electrical', 'Electrical'
    HVAC = 'hvac', 'HVAC'
    FURNITURE = 'furniture', 'Furniture'
    APPLIANCE = 'appliance', 'Appliance'
    IT = 'it', 'IT / Network'
    GENERAL = 'general', 'General'


class WorkOrderPriority(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    CRITICAL = 'critical', 'Critical'


class WorkOrderStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'
    ESCALATED = 'escalated', 'Escalated'
    CANCELLED = 'cancelled', 'Cancelled'


OPEN_WORK_ORDER_STATUSES = (
    WorkOrderStatus.PENDING,
    WorkOrderStatus.IN_PROGRESS,
    WorkOrderStatus.ESCALATED,
)

# Escalation bumps priority one step; critical stays critical
PRIORITY_ESCALATION = {
    WorkOrderPriority.LOW: WorkOrderPriority.MEDIUM,
    WorkOrderPriority.MEDIUM: WorkOrderPriority.HIGH,
    WorkOrderPriority.HIGH: WorkOrderPriority.CRITICAL,
    WorkOrderPriority.CRITICAL: WorkOrderPriority.CRITICAL,
}

WORK_ORDER_TRANSITIONS = {
    WorkOrderStatus.PENDING: {WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.ESCALATED, WorkOrderStatus.CANCELLED},
    WorkOrderStatus.IN_PROGRESS: {WorkOrderStatus.COMPLETED, WorkOrderStatus.ESCALATED, WorkOrderStatus.CANCELLED},
    WorkOrderStatus.ESCALATED: {WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED},
    WorkOrderStatus.COMPLETED: set(),
    WorkOrderStatus.CANCELLED: set(),
}


class WorkOrder(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='work_orders')
    work_order_number = models.CharField(max_length=40, unique=True)
    room = models.ForeignKey(
        'rooms.Room',
        on_delete=models.SET_NULL,
        related_name='work_orders',
        null=True,
        blank=True,
    )

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=20, choices=WorkOrderCategory.choices, default=WorkOrderCategory.GENERAL)
    priority = models.CharField(max_length=10, choices=WorkOrderPriority.choices, default=WorkOrderPriority.MEDIUM)
    status = models.CharField(max_length=20, choices=WorkOrderStatus.choices, default=WorkOrderStatus.PENDING)

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='work_orders',
        null=True,
        blank=True,
    )
    assigned_at = models.DateTimeField(null=True, blank=True)

    estimated_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    estimated_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    actual_hours = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))],
    )
    actual_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))],
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    completion_notes = models.TextField(blank=True)
    escalation_reason = models.TextField(blank=True)

    qr_request = models.ForeignKey(
        'qr.ServiceRequest',
        on_delete=models.SET_NULL,
        related_name='work_orders',
        null=True,
        blank=True,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='+',
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'maintenance_work_orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'status']),
            models.Index(fields=['tenant', 'priority']),
        ]

    def __str__(self):
        return f"{self.work_order_number} - {self.title}"

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in WORK_ORDER_TRANSITIONS.get(self.status, set())
