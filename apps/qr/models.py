import uuid

from django.conf import settings
from django.db import models


class ScanType(models.TextChoices):
    ROOM = 'room', 'Room'
    LOBBY = 'lobby', 'Lobby'
    RESTAURANT = 'restaurant', 'Restaurant'


class ServiceType(models.TextChoices):
    WIFI_SUPPORT = 'wifi_support', 'Wi-Fi Support'
    ROOM_SERVICE = 'room_service', 'Room Service'
    HOUSEKEEPING = 'housekeeping', 'Housekeeping'
    MAINTENANCE = 'maintenance', 'Maintenance'
    CONCIERGE = 'concierge', 'Concierge'
    FEEDBACK = 'feedback', 'Feedback'
    GENERAL = 'general', 'General'


class RequestStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ASSIGNED = 'assigned', 'Assigned'
    ACCEPTED = 'accepted', 'Accepted'
    PREPARING = 'preparing', 'Preparing'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class RequestPriority(models.TextChoices):
    LOW = 'low', 'Low'
    NORMAL = 'normal', 'Normal'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


class MessageSender(models.TextChoices):
    GUEST = 'guest', 'Guest'
    STAFF = 'staff', 'Staff'


OPEN_REQUEST_STATUSES = (
    RequestStatus.PENDING,
    RequestStatus.ASSIGNED,
    RequestStatus.ACCEPTED,
    RequestStatus.PREPARING,
)

REQUEST_STATUS_TRANSITIONS = {
    RequestStatus.PENDING: {RequestStatus.ASSIGNED, RequestStatus.ACCEPTED, RequestStatus.CANCELLED},
    RequestStatus.ASSIGNED: {RequestStatus.ACCEPTED, RequestStatus.CANCELLED},
    RequestStatus.ACCEPTED: {RequestStatus.PREPARING, RequestStatus.COMPLETED, RequestStatus.CANCELLED},
    RequestStatus.PREPARING: {RequestStatus.COMPLETED, RequestStatus.CANCELLED},
    RequestStatus.COMPLETED: set(),
    RequestStatus.CANCELLED: set(),
}

# Portal endpoint slug -> request type
SERVICE_ENDPOINTS = {
    'wifi-request': ServiceType.WIFI_SUPPORT,
    'room-service': ServiceType.ROOM_SERVICE,
    'digital-menu': ServiceType.ROOM_SERVICE,
    'housekeeping': ServiceType.HOUSEKEEPING,
    'maintenance': ServiceType.MAINTENANCE,
    'events': ServiceType.CONCIERGE,
    'front-desk-call': ServiceType.CONCIERGE,
    'feedback': ServiceType.FEEDBACK,
}

# Request type -> team that handles it
SERVICE_TEAMS = {
    ServiceType.WIFI_SUPPORT: 'IT',
    ServiceType.ROOM_SERVICE: 'Kitchen',
    ServiceType.HOUSEKEEPING: 'Housekeeping',
    ServiceType.MAINTENANCE: 'Maintenance',
    ServiceType.CONCIERGE: 'Front Desk',
    ServiceType.FEEDBACK: 'Management',
    ServiceType.GENERAL: 'Front Desk',
}


def default_services():
    return list(SERVICE_ENDPOINTS)


class QRCode(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='qr_codes')
    qr_token = models.CharField(max_length=64, unique=True, db_index=True)
    label = models.CharField(max_length=120)
    # Lobby and restaurant codes have no room
    room = models.ForeignKey(
        'rooms.Room',
        on_delete=models.CASCADE,
        related_name='qr_codes',
        null=True,
        blank=True,
    )
    scan_type = models.CharField(max_length=20, choices=ScanType.choices, default=ScanType.ROOM)
    services = models.JSONField(default=default_services, blank=True)
    is_active = models.BooleanField(default=True)
    scan_count = models.PositiveIntegerField(default=0)
    last_scanned_at = models.DateTimeField(null=True, blank=True)

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
        db_table = 'qr_codes'
        ordering = ['label']
        verbose_name = 'QR code'

    def __str__(self):
        return self.label


class ServiceRequest(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='service_requests')
    qr_code = models.ForeignKey(
        QRCode,
        on_delete=models.SET_NULL,
        related_name='requests',
        null=True,
        blank=True,
    )
    room = models.ForeignKey(
        'rooms.Room',
        on_delete=models.SET_NULL,
        related_name='service_requests',
        null=True,
        blank=True,
    )
    guest_session_id = models.CharField(max_length=64, db_index=True)

    service_type = models.CharField(max_length=20, choices=ServiceType.choices, default=ServiceType.GENERAL)
    request_details = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=RequestStatus.choices, default=RequestStatus.PENDING)
    priority = models.CharField(max_length=10, choices=RequestPriority.choices, default=RequestPriority.NORMAL)
    assigned_team = models.CharField(max_length=50, blank=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='service_requests',
        null=True,
        blank=True,
    )
    notes = models.TextField(blank=True)
    created_by_guest = models.BooleanField(default=True)

    # Room service charge posted to the guest's folio
    folio_charge = models.ForeignKey(
        'billing.FolioCharge',
        on_delete=models.SET_NULL,
        related_name='+',
        null=True,
        blank=True,
    )

    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='+',
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'qr_service_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'status']),
            models.Index(fields=['tenant', 'updated_at']),
        ]

    def __str__(self):
        return f"{self.get_service_type_display()} ({self.status})"

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_REQUEST_STATUSES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in REQUEST_STATUS_TRANSITIONS.get(self.status, set())


class RequestMessage(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    request = models.ForeignKey(ServiceRequest, on_delete=models.CASCADE, related_name='messages')
    sender = models.CharField(max_length=10, choices=MessageSender.choices)
    staff_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='+',
        null=True,
        blank=True,
    )
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'qr_request_messages'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.sender}: {self.message[:40]}"
