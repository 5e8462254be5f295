from decimal import Decimal
import uuid

from django.core.validators import MinValueValidator
from django.db import models


class RoomStatus(models.TextChoices):
    AVAILABLE = 'available', 'Available'
    OCCUPIED = 'occupied', 'Occupied'
    RESERVED = 'reserved', 'Reserved'
    DIRTY = 'dirty', 'Dirty'
    CLEAN = 'clean', 'Clean'
    MAINTENANCE = 'maintenance', 'Maintenance'
    OUT_OF_SERVICE = 'oos', 'Out of Service'


# Allowed room status changes: current -> permitted next states
ROOM_STATUS_TRANSITIONS = {
    RoomStatus.AVAILABLE: {
        RoomStatus.OCCUPIED,
        RoomStatus.RESERVED,
        RoomStatus.DIRTY,
        RoomStatus.MAINTENANCE,
        RoomStatus.OUT_OF_SERVICE,
    },
    RoomStatus.OCCUPIED: {RoomStatus.DIRTY, RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE},
    RoomStatus.RESERVED: {RoomStatus.OCCUPIED, RoomStatus.AVAILABLE},
    RoomStatus.DIRTY: {RoomStatus.CLEAN, RoomStatus.MAINTENANCE},
    RoomStatus.CLEAN: {RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE},
    RoomStatus.MAINTENANCE: {RoomStatus.AVAILABLE, RoomStatus.DIRTY},
    RoomStatus.OUT_OF_SERVICE: {RoomStatus.MAINTENANCE, RoomStatus.AVAILABLE},
}

# Rooms in these states cannot be sold
UNSELLABLE_STATUSES = (RoomStatus.MAINTENANCE, RoomStatus.OUT_OF_SERVICE)


class RoomType(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='room_types')
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    base_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    max_occupancy = models.PositiveSmallIntegerField(default=2)
    amenities = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'room_types'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'name'], name='unique_room_type_per_tenant'),
        ]

    def __str__(self):
        return self.name


class Room(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='rooms')
    room_number = models.CharField(max_length=20)
    floor = models.SmallIntegerField(null=True, blank=True)
    room_type = models.ForeignKey(
        RoomType,
        on_delete=models.PROTECT,
        related_name='rooms',
        null=True,
        blank=True,
    )
    status = models.CharField(
        max_length=20,
        choices=RoomStatus.choices,
        default=RoomStatus.AVAILABLE,
    )
    notes = models.TextField(blank=True)
    last_cleaned = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'rooms'
        ordering = ['room_number']
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'room_number'], name='unique_room_number_per_tenant'),
        ]
        indexes = [
            models.Index(fields=['tenant', 'status']),
        ]

    def __str__(self):
        return f"Room {self.room_number}"

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in ROOM_STATUS_TRANSITIONS.get(self.status, set())

    @property
    def is_sellable(self) -> bool:
        return self.status not in UNSELLABLE_STATUSES
