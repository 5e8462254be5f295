from decimal import Decimal
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class FolioStatus(models.TextChoices):
    OPEN = 'open', 'Open'
    CLOSED = 'closed', 'Closed'


class ChargeType(models.TextChoices):
    ROOM = 'room', 'Room'
    RESTAURANT = 'restaurant', 'Restaurant'
    ROOM_SERVICE = 'room_service', 'Room Service'
    SERVICE = 'service', 'Service'
    LAUNDRY = 'laundry', 'Laundry'
    MINIBAR = 'minibar', 'Minibar'
    OVERSTAY = 'overstay', 'Overstay'
    OTHER = 'other', 'Other'


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    CARD = 'card', 'Card'
    TRANSFER = 'transfer', 'Bank Transfer'
    POS = 'pos', 'POS Terminal'
    ROOM_FOLIO = 'room_folio', 'Charge to Room'
    WALLET = 'wallet', 'Wallet'


class PaymentRecordStatus(models.TextChoices):
    COMPLETED = 'completed', 'Completed'
    PENDING = 'pending', 'Pending'
    FAILED = 'failed', 'Failed'
    REFUNDED = 'refunded', 'Refunded'


class ShiftStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    COMPLETED = 'completed', 'Completed'


class Folio(models.Model):
    """Running account of a stay: charges posted against payments received."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='folios')
    folio_number = models.CharField(max_length=40)
    invoice_number = models.CharField(max_length=30, blank=True)
    reservation = models.ForeignKey(
        'reservations.Reservation',
        on_delete=models.PROTECT,
        related_name='folios',
        null=True,
        blank=True,
    )
    status = models.CharField(max_length=10, choices=FolioStatus.choices, default=FolioStatus.OPEN)

    # Denormalised totals (see recalculate_folio_balance)
    total_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_payments = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    closed_at = models.DateTimeField(null=True, blank=True)
    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='+',
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'folios'
        ordering = ['-created_at']
        unique_together = [['tenant', 'folio_number']]
        indexes = [
            models.Index(fields=['tenant', 'status']),
        ]

    def __str__(self):
        return f"{self.folio_number} ({self.balance})"

    @property
    def is_open(self) -> bool:
        return self.status == FolioStatus.OPEN


class FolioCharge(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    folio = models.ForeignKey(Folio, on_delete=models.CASCADE, related_name='charges')
    charge_type = models.CharField(max_length=20, choices=ChargeType.choices, default=ChargeType.OTHER)
    description = models.CharField(max_length=255)

    # Tax components; amount == base + service + vat
    base_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    service_charge_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    vat_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    is_taxable = models.BooleanField(default=True)
    is_service_chargeable = models.BooleanField(default=True)

    # Source document (e.g. pos_order / service_request)
    reference_type = models.CharField(max_length=40, blank=True)
    reference_id = models.CharField(max_length=64, blank=True)

    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='+',
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'folio_charges'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['folio', 'charge_type']),
        ]

    def __str__(self):
        return f"{self.description}: {self.amount}"


class ShiftSession(models.Model):
    """A staff member's cash drawer session."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='shifts')
    staff = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='shifts',
    )
    role = models.CharField(max_length=20)
    start_time = models.DateTimeField(auto_now_add=True)
    end_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=ShiftStatus.choices, default=ShiftStatus.ACTIVE)

    opening_cash = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    cash_total = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    expected_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    cash_variance = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    pos_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    handover_notes = models.TextField(blank=True)
    unresolved_items = models.JSONField(default=list, blank=True)
    authorized_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='+',
        null=True,
        blank=True,
    )

    class Meta:
        db_table = 'shift_sessions'
        ordering = ['-start_time']
        indexes = [
            models.Index(fields=['tenant', 'status']),
            models.Index(fields=['staff', 'status']),
        ]

    def __str__(self):
        return f"Shift {self.staff} {self.start_time:%Y-%m-%d %H:%M}"


class Payment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey('tenants.Tenant', on_delete=models.CASCADE, related_name='payments')
    # Null for walk-in POS sales
    folio = models.ForeignKey(
        Folio,
        on_delete=models.PROTECT,
        related_name='payments',
        null=True,
        blank=True,
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    reference = models.CharField(max_length=100, blank=True)
    status = models.CharField(
        max_length=20,
        choices=PaymentRecordStatus.choices,
        default=PaymentRecordStatus.COMPLETED,
    )
    notes = models.TextField(blank=True)

    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='payments_processed',
        null=True,
        blank=True,
    )
    shift = models.ForeignKey(
        ShiftSession,
        on_delete=models.SET_NULL,
        related_name='payments',
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'created_at']),
            models.Index(fields=['folio', 'status']),
        ]

    def __str__(self):
        return f"{self.amount} via {self.payment_method} ({self.status})"
