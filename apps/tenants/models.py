from decimal import Decimal
import datetime
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone


class SubscriptionStatus(models.TextChoices):
    TRIALING = 'trialing', 'Trialing'
    ACTIVE = 'active', 'Active'
    SUSPENDED = 'suspended', 'Suspended'
    CANCELLED = 'cancelled', 'Cancelled'


def default_charge_types():
    return ['room']


class Tenant(models.Model):
    """A hotel using the platform. Every operational row belongs to one tenant."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    hotel_name = models.CharField(max_length=200)
    hotel_slug = models.SlugField(max_length=120, unique=True)

    # Contact
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True, default='Nigeria')

    # Localisation & branding
    currency = models.CharField(max_length=3, default='NGN')
    timezone = models.CharField(max_length=50, default='Africa/Lagos')
    logo_url = models.URLField(blank=True)
    brand_colors = models.JSONField(default=dict, blank=True)

    # Subscription
    subscription_status = models.CharField(
        max_length=20,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.TRIALING,
    )
    trial_start = models.DateField(null=True, blank=True)
    trial_end = models.DateField(null=True, blank=True)
    setup_completed = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tenants'
        ordering = ['hotel_name']
        indexes = [
            models.Index(fields=['subscription_status']),
        ]

    def __str__(self):
        return self.hotel_name

    @property
    def is_operational(self) -> bool:
        """Staff may use the API only while the subscription is live."""
        if self.subscription_status == SubscriptionStatus.ACTIVE:
            return True
        if self.subscription_status == SubscriptionStatus.TRIALING:
            return self.trial_end is None or self.trial_end >= timezone.localdate()
        return False


class HotelSettings(models.Model):
    """Per-hotel tax, front desk and document numbering configuration."""

    tenant = models.OneToOneField(
        Tenant,
        on_delete=models.CASCADE,
        related_name='hotel_settings',
        primary_key=True,
    )

    # Tax & service charge (percentages)
    vat_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('7.50'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
    )
    service_charge_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('10.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
    )
    tax_inclusive = models.BooleanField(default=False)
    service_charge_inclusive = models.BooleanField(default=False)
    vat_applicable_to = models.JSONField(default=default_charge_types, blank=True)
    service_applicable_to = models.JSONField(default=default_charge_types, blank=True)
    show_tax_breakdown = models.BooleanField(default=True)

    # Front desk
    check_in_time = models.TimeField(default=datetime.time(14, 0))
    check_out_time = models.TimeField(default=datetime.time(12, 0))
    early_checkin_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    late_checkout_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    # Documents
    invoice_prefix = models.CharField(max_length=10, default='INV')
    receipt_prefix = models.CharField(max_length=10, default='RCT')
    next_invoice_seq = models.PositiveIntegerField(default=1)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'hotel_settings'
        verbose_name_plural = 'Hotel settings'

    def __str__(self):
        return f"Settings for {self.tenant.hotel_name}"

    @classmethod
    def defaults(cls) -> dict:
        """Initial values for a freshly created hotel."""
        return {
            'vat_rate': settings.HOTEL_DEFAULT_VAT_RATE,
            'service_charge_rate': settings.HOTEL_DEFAULT_SERVICE_CHARGE_RATE,
        }
