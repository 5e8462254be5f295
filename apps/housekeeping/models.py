from decimal import Decimal
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class TaskType(models.TextChoices):
    CLEANING = 'cleaning', 'Cleaning'
    CHECKOUT_CLEANING = 'checkout_cleaning', 'Checkout Cleaning'
    TURNDOWN = 'turndown', 'Turndown'
    INSPECTION = 'inspection', 'Inspection'
    AMENITY_REQUEST = 'amenity_request', 'Amenity Request'
    DEEP_CLEAN = 'deep_clean', 'Deep Clean'


class TaskPriority(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


class TaskStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'
    DELAYED = 'delayed', 'Delayed'
    CANCELLED = 'cancelled', 'Cancelled'


OPEN_TASK_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.DELAYED)

# Completing one of these turns a dirty room clean
CLEANING_TASK_TYPES = (TaskType.CLEANING, TaskType.CHECKOUT_CLEANING, TaskType.DEEP_CLEAN)

TASK_STATUS_TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.IN_PROGRESS, TaskStatus.DELAYED, TaskStatus.CANCELLED},
    TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED, TaskStatus.DELAYED, TaskStatus.CANCELLED},
    TaskStatus.DELAYED: {TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED},
    TaskStatus.COMPLETED: set(),
    TaskStatus.CANCELLED: set(),
}


class SupplyCategory(models.TextChoices):
    BEDDING = 'bedding', 'Bedding'
    BATHROOM = 'bathroom', 'Bathroom'
    CLEANING = 'cleaning', 'Cleaning'
    AMENITIES = 'amenities', 'Amenities'
    MAINTENANCE = 'maintenance', 'Maintenance'
    FOOD = 'food', 'Food'


class HousekeepingTask(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='housekeeping_tasks')
    room = models.ForeignKey(
        'rooms.Room',
        on_delete=models.CASCADE,
        related_name='housekeeping_tasks',
        null=True,
        blank=True,
    )

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    task_type = models.CharField(max_length=30, choices=TaskType.choices, default=TaskType.CLEANING)
    priority = models.CharField(max_length=10, choices=TaskPriority.choices, default=TaskPriority.MEDIUM)
    status = models.CharField(max_length=20, choices=TaskStatus.choices, default=TaskStatus.PENDING)

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='housekeeping_tasks',
        null=True,
        blank=True,
    )
    assigned_at = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    estimated_minutes = models.PositiveIntegerField(default=30)
    actual_minutes = models.PositiveIntegerField(null=True, blank=True)
    checklist = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)

    qr_request = models.ForeignKey(
        'qr.ServiceRequest',
        on_delete=models.SET_NULL,
        related_name='housekeeping_tasks',
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
        db_table = 'housekeeping_tasks'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'status']),
            models.Index(fields=['assigned_to', 'status']),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in TASK_STATUS_TRANSITIONS.get(self.status, set())


class Supply(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='supplies')
    name = models.CharField(max_length=120)
    category = models.CharField(max_length=20, choices=SupplyCategory.choices, default=SupplyCategory.AMENITIES)
    unit = models.CharField(max_length=20, default='piece')
    current_stock = models.PositiveIntegerField(default=0)
    minimum_stock = models.PositiveIntegerField(default=0)
    unit_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'housekeeping_supplies'
        ordering = ['category', 'name']
        verbose_name_plural = 'Supplies'
        unique_together = [['tenant', 'name']]

    def __str__(self):
        return f"{self.name} ({self.current_stock} {self.unit})"

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.minimum_stock


class SupplyUsage(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    supply = models.ForeignKey(Supply, on_delete=models.CASCADE, related_name='usage')
    quantity = models.PositiveIntegerField()
    room = models.ForeignKey('rooms.Room', on_delete=models.SET_NULL, related_name='+', null=True, blank=True)
    task = models.ForeignKey(
        HousekeepingTask,
        on_delete=models.SET_NULL,
        related_name='supply_usage',
        null=True,
        blank=True,
    )
    used_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='+',
        null=True,
        blank=True,
    )
    notes = models.TextField(blank=True)
    used_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'housekeeping_supply_usage'
        ordering = ['-used_at']

    def __str__(self):
        return f"{self.quantity} x {self.supply.name}"
